"""
Hold-to-confirm timers and world unlock gates.

A HoldTimer fills from 0 to 1 while its condition stays true for
`duration` seconds and drops straight back to 0 the moment the condition
is false. A HoldGate wires one timer to a world unlock:

    arming = current == prerequisite
             and not unlocked
             and deep zone active
             and OK gesture held

Reaching 1 flips `unlocked` (for good) and calls `on_unlock(target)`.
"""

import logging
from typing import Callable, Optional

from handworlds.core.events import EventBus, Events
from handworlds.core.types import GateState, WorldId

logger = logging.getLogger(__name__)


class HoldTimer:
    """Continuous-hold timer writing into a state object.

    The state object needs `hold_start` and `progress` attributes
    (GateState, or an adapter over WorldDState).
    """

    def __init__(self, duration_s: float, state=None):
        if duration_s <= 0:
            raise ValueError("hold duration must be positive")
        self.duration_s = duration_s
        self.state = state if state is not None else GateState()

    @property
    def progress(self) -> float:
        return self.state.progress

    def update(self, condition: bool, now: float) -> float:
        """Advance or reset the hold. Returns the new progress."""
        if not condition:
            self.reset()
            return 0.0
        if self.state.hold_start is None:
            self.state.hold_start = now
        elapsed = now - self.state.hold_start
        self.state.progress = max(0.0, min(elapsed / self.duration_s, 1.0))
        return self.state.progress

    def reset(self) -> bool:
        """Clear the hold. Returns True if progress actually changed."""
        self.state.hold_start = None
        if self.state.progress != 0.0:
            self.state.progress = 0.0
            return True
        return False


class HoldGate:
    """OK-hold unlock from `prerequisite` into `target`."""

    def __init__(self, prerequisite: WorldId, target: WorldId, state: GateState,
                 on_unlock: Callable[[WorldId], None], hold_seconds: float = 3.0,
                 event_bus: Optional[EventBus] = None):
        self.prerequisite = prerequisite
        self.target = target
        self.state = state
        self.on_unlock = on_unlock
        self._timer = HoldTimer(hold_seconds, state)
        self._bus = event_bus or EventBus()

    @property
    def progress(self) -> float:
        return self.state.progress

    @property
    def unlocked(self) -> bool:
        return self.state.unlocked

    def is_armed(self, current_world: WorldId, deep_zone_active: bool, ok_gesture: bool) -> bool:
        return (current_world == self.prerequisite
                and not self.state.unlocked
                and deep_zone_active
                and ok_gesture)

    def update(self, current_world: WorldId, deep_zone_active: bool,
               ok_gesture: bool, now: float) -> bool:
        """Evaluate the gate for one landmark frame. Returns True if it fired."""
        if not self.is_armed(current_world, deep_zone_active, ok_gesture):
            self.abort()
            return False

        before = self.state.progress
        progress = self._timer.update(True, now)
        if progress != before:
            self._bus.emit(Events.GATE_PROGRESS, world=self.target.value, progress=progress)

        if progress >= 1.0:
            self.unlock()
            self.on_unlock(self.target)
            return True
        return False

    def unlock(self, auto: bool = False) -> bool:
        """Mark the target world unlocked. Idempotent."""
        if self.state.unlocked:
            return False
        self.state.unlocked = True
        logger.info("World %s unlocked (%s)", self.target.value,
                    "deep zone" if auto else "hold gesture")
        self._bus.emit(Events.GATE_UNLOCKED, world=self.target.value, auto=auto)
        return True

    def abort(self) -> None:
        """Drop any hold in progress; unlocked flag is untouched."""
        if self._timer.reset():
            self._bus.emit(Events.GATE_PROGRESS, world=self.target.value, progress=0.0)
