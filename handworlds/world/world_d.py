"""
World D puzzle: squeeze the core (fist stress hold) and spin it (wrist
rotation), both driven by the left hand.

Stress uses a hysteresis band on the smoothed fist strength: on at 0.5,
off below 0.35. Rotation only counts while the hand is relaxed (not
stressed and below the blocking threshold); the unsigned shortest-path
wrist deltas accumulate up to 1.5 rad, after which rotation progress is
latched at 1.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from handworlds.control.hold_gate import HoldTimer
from handworlds.core.events import EventBus, Events
from handworlds.core.types import WorldDState
from handworlds.recognition.gestures import (
    fist_strength, wrist_rotation_angle, shortest_angle_delta,
)

logger = logging.getLogger(__name__)


@dataclass
class WorldDConfig:
    """World D thresholds."""
    fist_smoothing: float = 0.35
    fist_threshold: float = 0.5
    release_ratio: float = 0.7
    rotation_block_threshold: float = 0.35
    rotate_required: float = 1.5
    stress_hold_ms: float = 3000.0

    @classmethod
    def from_dict(cls, config: dict) -> "WorldDConfig":
        known = cls.__dataclass_fields__
        return cls(**{k: v for k, v in (config or {}).items() if k in known})

    @property
    def release_threshold(self) -> float:
        return self.fist_threshold * self.release_ratio


class _StressHold:
    """Exposes WorldDState's stress fields under the HoldTimer names."""

    def __init__(self, state: WorldDState):
        self._state = state

    @property
    def hold_start(self):
        return self._state.stress_hold_start

    @hold_start.setter
    def hold_start(self, value):
        self._state.stress_hold_start = value

    @property
    def progress(self):
        return self._state.stress_hold_progress

    @progress.setter
    def progress(self, value):
        self._state.stress_hold_progress = value


class WorldDPuzzle:
    """Stress / rotation mini-state, only fed while world D is current."""

    def __init__(self, state: WorldDState, config: WorldDConfig = None,
                 event_bus: Optional[EventBus] = None,
                 on_rotate: Optional[Callable[[float], None]] = None):
        self.state = state
        self.config = config or WorldDConfig()
        self._bus = event_bus or EventBus()
        self._on_rotate = on_rotate
        self._stress_timer = HoldTimer(self.config.stress_hold_ms / 1000.0, _StressHold(state))

    # -------------------------------------------------------------------------
    # Landmark cadence
    # -------------------------------------------------------------------------

    def update(self, left_hand, now: float) -> None:
        """Feed one landmark frame's left hand (None = absent)."""
        if left_hand is None:
            self.hand_lost()
            return
        self.apply_fist_strength(fist_strength(left_hand), now)
        if self.rotation_blocked:
            self.state.last_wrist_angle = None
        else:
            self.apply_wrist_angle(wrist_rotation_angle(left_hand))

    def apply_fist_strength(self, raw_strength: float, now: float) -> None:
        """Smooth a raw fist score and run the stress band on it."""
        st = self.state
        cfg = self.config
        st.smoothed_fist_strength += (raw_strength - st.smoothed_fist_strength) * cfg.fist_smoothing

        if st.stress_active:
            active = st.smoothed_fist_strength >= cfg.release_threshold
        else:
            active = st.smoothed_fist_strength >= cfg.fist_threshold
        self._set_stress(active)
        self.update_stress_hold(now)

    @property
    def rotation_blocked(self) -> bool:
        st = self.state
        return st.stress_active or st.smoothed_fist_strength >= self.config.rotation_block_threshold

    def apply_wrist_angle(self, angle: Optional[float]) -> float:
        """Accumulate rotation from a wrist angle. Returns the signed delta used."""
        st = self.state
        if angle is None:
            st.last_wrist_angle = None
            return 0.0

        delta = 0.0
        if st.last_wrist_angle is not None:
            delta = shortest_angle_delta(angle, st.last_wrist_angle)
            required = self.config.rotate_required
            st.rotation_accum = min(st.rotation_accum + abs(delta), required)
            if st.rotation_progress < 1.0:
                st.rotation_progress = min(st.rotation_accum / required, 1.0)
                if st.rotation_progress >= 1.0:
                    logger.info("World D rotation complete")
                    self._bus.emit(Events.ROTATION_COMPLETE)
            if delta and self._on_rotate is not None:
                self._on_rotate(delta)
        st.last_wrist_angle = angle
        return delta

    def hand_lost(self) -> None:
        """Left hand gone: relax the core and forget the last angle."""
        self.state.last_wrist_angle = None
        self.state.smoothed_fist_strength = 0.0
        self._set_stress(False)

    # -------------------------------------------------------------------------
    # Stress hold
    # -------------------------------------------------------------------------

    def _set_stress(self, active: bool) -> None:
        st = self.state
        if active == st.stress_active:
            return
        st.stress_active = active
        if not active and st.stress_hold_progress < 1.0:
            self._stress_timer.reset()
        logger.debug("World D stress %s (fist=%.2f)",
                     "on" if active else "off", st.smoothed_fist_strength)
        self._bus.emit(Events.STRESS_CHANGED, active=active)

    def update_stress_hold(self, now: float) -> None:
        """Advance the stress hold while stressed. A completed hold stays at 1."""
        st = self.state
        if not st.stress_active or st.stress_hold_progress >= 1.0:
            return
        if self._stress_timer.update(True, now) >= 1.0:
            logger.info("World D stress hold complete")
            self._bus.emit(Events.STRESS_HOLD_COMPLETE)

    def reset(self) -> None:
        """Clear the whole puzzle (world D left or scene reinitialized)."""
        st = self.state
        st.rotation_accum = 0.0
        st.rotation_progress = 0.0
        st.stress_active = False
        st.stress_hold_start = None
        st.stress_hold_progress = 0.0
        st.smoothed_fist_strength = 0.0
        st.last_wrist_angle = None
