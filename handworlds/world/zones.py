"""
Zone-based world state machine (A -> B -> C -> D).

Per render tick the camera's distance to its orbit target drives three
checks, in order:

    1. Deep-zone edges (A, B, C): entering latches "deep zone reached"
       and, in B, unlocks and enters C outright; leaving aborts the OK
       hold of the gate whose prerequisite is the active world.
    2. Return hysteresis (B, C, D): arm once the camera is clearly inside
       the entry distance, fire back to the predecessor when it pulls out
       past the entry distance again.
    3. Forward re-entry (A, B, C with the next world unlocked): arm once
       the camera is outside the deep zone plus a margin, fire forward on
       the next deep-zone entry.

Every transition goes through `request_world`, which defers the switch
until the destination's model is ready and drops it if the user has left
the world the request was made from.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from handworlds.control.hold_gate import HoldGate
from handworlds.core.events import EventBus, Events
from handworlds.core.types import (
    SessionState, WorldId, ZoneState, PendingTransition,
    DEEP_ZONE_WORLDS, WORLD_PROFILES, MAX_GROWTH,
)
from handworlds.world.assets import AssetRegistry, load_failed

logger = logging.getLogger(__name__)

# Float slack when the camera rests on a clamped zoom limit
_DISTANCE_EPS = 1e-6


@dataclass
class ZoneConfig:
    """Distances and switches for the world state machine."""
    min_zoom_distance: float = 50.0
    deep_zone_distance: float = 70.0
    return_margin: float = 60.0
    return_arm_margin: float = 10.0
    auto_enter_from_b: bool = True
    ok_hold_seconds: float = 3.0
    max_growth: float = MAX_GROWTH
    growth_speed: float = 0.005

    @classmethod
    def from_dict(cls, zones: dict, gestures: dict = None, growth: dict = None) -> "ZoneConfig":
        """Create config from the zones, gestures and growth sections."""
        gestures = gestures or {}
        growth = growth or {}
        known = cls.__dataclass_fields__
        values = {k: v for k, v in (zones or {}).items() if k in known}
        if "ok_hold_ms" in gestures:
            values["ok_hold_seconds"] = gestures["ok_hold_ms"] / 1000.0
        values.update({k: v for k, v in growth.items() if k in known})
        return cls(**values)


class WorldStateMachine:
    """Owns world switching, zone hysteresis and the three unlock gates."""

    def __init__(self, state: SessionState, rig, assets: AssetRegistry,
                 config: ZoneConfig = None, event_bus: Optional[EventBus] = None,
                 on_leave_d: Optional[Callable[[], None]] = None):
        self.state = state
        self.rig = rig
        self.assets = assets
        self.config = config or ZoneConfig()
        self._bus = event_bus or EventBus()
        self._on_leave_d = on_leave_d

        self.gates: Dict[WorldId, HoldGate] = {}
        for prerequisite in (WorldId.A, WorldId.B, WorldId.C):
            target = prerequisite.successor
            self.gates[target] = HoldGate(
                prerequisite, target, state.gates[target],
                on_unlock=self.request_world,
                hold_seconds=self.config.ok_hold_seconds,
                event_bus=self._bus,
            )

    # -------------------------------------------------------------------------
    # Session start
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Bind the session to the rig's current view, in world A."""
        st = self.state
        st.default_view = self.rig.get_view_state()
        st.views[WorldId.A] = st.default_view.copy()
        self.rig.set_world_visibility(st.current_world)
        self.rig.apply_zoom_limits(st.current_world)
        self.assets.set_growth_value(st.growth[WorldId.A])
        self.assets.preload(WorldId.C, WorldId.D)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def current_world(self) -> WorldId:
        return self.state.current_world

    def max_distance(self, world: WorldId = None) -> float:
        return self.rig.get_max_zoom_distance(world or self.state.current_world)

    def gate_from(self, world: WorldId) -> Optional[HoldGate]:
        """The gate whose prerequisite is `world`."""
        successor = world.successor
        return self.gates.get(successor) if successor else None

    # -------------------------------------------------------------------------
    # Gates
    # -------------------------------------------------------------------------

    def update_gates(self, ok_gesture: bool, now: float) -> None:
        for gate in self.gates.values():
            gate.update(self.state.current_world, self.state.zone.deep_zone_active,
                        ok_gesture, now)

    def abort_gates(self) -> None:
        for gate in self.gates.values():
            gate.abort()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def request_world(self, target: WorldId) -> bool:
        """Switch to `target` once its model is ready. Returns True if switched now."""
        st = self.state
        if target == st.current_world:
            return False
        if not st.is_unlocked(target):
            logger.warning("Ignoring request for locked world %s", target.value)
            return False
        if st.pending is not None and st.pending.target == target:
            return False

        handle = self.assets.ensure_model_ready(target)
        if handle.done():
            if load_failed(handle):
                logger.warning("World %s model unavailable, staying in %s",
                               target.value, st.current_world.value)
                self._bus.emit(Events.TRANSITION_ABANDONED, target=target.value,
                               reason="load_failed")
                return False
            return self.switch_world(target)

        st.pending = PendingTransition(target, st.current_world, handle)
        logger.info("World %s not ready yet, transition pending", target.value)
        self._bus.emit(Events.TRANSITION_PENDING, target=target.value)
        return False

    def poll_pending(self) -> bool:
        """Complete or drop a deferred transition. Returns True if switched."""
        pending = self.state.pending
        if pending is None:
            return False
        if self.state.current_world != pending.prerequisite:
            self._abandon(pending, "left_prerequisite")
            return False
        if not pending.handle.done():
            return False
        if load_failed(pending.handle):
            self._abandon(pending, "load_failed")
            return False
        self.state.pending = None
        return self.switch_world(pending.target)

    def _abandon(self, pending: PendingTransition, reason: str) -> None:
        self.state.pending = None
        logger.warning("Abandoned transition to %s (%s)", pending.target.value, reason)
        self._bus.emit(Events.TRANSITION_ABANDONED, target=pending.target.value, reason=reason)

    def switch_world(self, next_world: WorldId) -> bool:
        """Leave the current world for `next_world`. No-op if already there."""
        st = self.state
        previous = st.current_world
        if next_world == previous:
            return False

        st.views[previous] = self.rig.get_view_state()

        if previous == WorldId.A and next_world == WorldId.B and not st.growth_complete:
            st.growth[WorldId.A] = self.config.max_growth
            st.growth_complete = True

        view = st.views.get(next_world) if next_world in st.visited else None
        if view is None:
            base = st.default_view or self.rig.get_view_state()
            view = base.rescaled(self.rig.get_max_zoom_distance(next_world))
            st.views[next_world] = view
            st.visited.add(next_world)
        self.rig.set_view_state(view)
        self.rig.set_world_visibility(next_world)
        self.rig.apply_zoom_limits(next_world)

        st.current_world = next_world
        self.abort_gates()

        st.zone = ZoneState()
        if next_world.predecessor is not None:
            distance = self.rig.distance_to_target()
            st.zone.return_distance = min(distance + self.config.return_margin,
                                          self.rig.get_max_zoom_distance(next_world))

        if previous == WorldId.D and self._on_leave_d is not None:
            self._on_leave_d()

        self._apply_growth(next_world)

        logger.info("Switched world %s -> %s", previous.value, next_world.value)
        self._bus.emit(Events.WORLD_CHANGED, previous=previous.value, current=next_world.value)
        return True

    # -------------------------------------------------------------------------
    # Zones
    # -------------------------------------------------------------------------

    def update_zones(self, distance: float) -> None:
        """Render-tick zone evaluation against the camera's distance to target."""
        st = self.state
        cfg = self.config
        world = st.current_world
        zone = st.zone
        is_deep = distance <= cfg.deep_zone_distance

        if world in DEEP_ZONE_WORLDS:
            if is_deep != zone.deep_zone_active:
                zone.deep_zone_active = is_deep
                if is_deep:
                    self._deep_zone_entered(world)
                else:
                    gate = self.gate_from(world)
                    if gate is not None:
                        gate.abort()
        else:
            zone.deep_zone_active = False

        if st.current_world != world:
            return

        if world.predecessor is not None and zone.return_distance is not None:
            arm_distance = max(zone.return_distance - cfg.return_arm_margin,
                               cfg.min_zoom_distance)
            if not zone.return_armed and distance < arm_distance:
                zone.return_armed = True
            if zone.return_armed and distance >= zone.return_distance - _DISTANCE_EPS:
                self.request_world(world.predecessor)
                return

        successor = world.successor
        if successor is not None and st.is_unlocked(successor):
            reenter = cfg.deep_zone_distance + WORLD_PROFILES[successor].reentry_margin
            if not zone.entry_armed and distance > reenter:
                zone.entry_armed = True
            if zone.entry_armed and is_deep:
                self.request_world(successor)

    def _deep_zone_entered(self, world: WorldId) -> None:
        st = self.state
        if not st.deep_zone_reached.get(world, False):
            st.deep_zone_reached[world] = True
            logger.info("Deep zone reached in world %s", world.value)
            self._bus.emit(Events.DEEP_ZONE_REACHED, world=world.value)

        if world == WorldId.B and self.config.auto_enter_from_b:
            gate = self.gates[WorldId.C]
            if not gate.unlocked:
                gate.unlock(auto=True)
                self.request_world(WorldId.C)

    # -------------------------------------------------------------------------
    # Growth
    # -------------------------------------------------------------------------

    def _apply_growth(self, world: WorldId) -> None:
        st = self.state
        if world == WorldId.B:
            st.growth[WorldId.B] = self.config.max_growth
            self.assets.set_growth_value(self.config.max_growth)
        elif world == WorldId.A:
            if st.growth_complete:
                st.growth[WorldId.A] = self.config.max_growth
            self.assets.set_growth_value(st.growth[WorldId.A])

    def advance_growth(self) -> None:
        """Grow world A's particle field one tick toward full."""
        st = self.state
        if st.current_world != WorldId.A or st.growth_complete:
            return
        value = min(st.growth[WorldId.A] + self.config.growth_speed, self.config.max_growth)
        st.growth[WorldId.A] = value
        self.assets.set_growth_value(value)
        if value >= self.config.max_growth:
            st.growth_complete = True
            logger.debug("World A growth complete")
