"""
Session controller: the two callbacks that drive a Hand Worlds session.

    on_landmarks(frame, now) - camera cadence. Right hand feeds the
                               continuous filter; left hand feeds the OK
                               gates and, in world D, the puzzle.
    on_tick(now)             - display cadence. Commits camera motion and
                               re-evaluates zones against the new distance.

Both run on the same thread and share one SessionState.
"""

import logging
from typing import Optional

from handworlds.control.continuous import ContinuousControlFilter, ControlConfig
from handworlds.core.events import EventBus, Events
from handworlds.core.types import HandFrame, SessionState, WorldId
from handworlds.detection.landmarks import as_landmark_array
from handworlds.recognition.gestures import is_ok_gesture
from handworlds.utils.config import DEFAULTS
from handworlds.world.assets import AssetRegistry
from handworlds.world.scene import OrbitRig
from handworlds.world.world_d import WorldDPuzzle, WorldDConfig
from handworlds.world.zones import WorldStateMachine, ZoneConfig

logger = logging.getLogger(__name__)

_FIRST_TICK_SECONDS = 1.0 / 60.0


class HandWorldsController:
    """Owns the session record and routes the two callbacks through it."""

    def __init__(self, rig: Optional[OrbitRig] = None, assets: Optional[AssetRegistry] = None,
                 config: Optional[dict] = None, event_bus: Optional[EventBus] = None):
        config = config or DEFAULTS
        self.config = config
        self.rig = rig or OrbitRig.from_config(config.get("zones", {}))
        self.assets = assets or AssetRegistry()
        self.event_bus = event_bus or EventBus()

        self.control_config = ControlConfig.from_dict(config.get("control", {}))
        self.zone_config = ZoneConfig.from_dict(config.get("zones", {}),
                                                config.get("gestures", {}),
                                                config.get("growth", {}))
        self.world_d_config = WorldDConfig.from_dict(config.get("world_d", {}))
        self.ok_pinch_ratio = config.get("gestures", {}).get("ok_pinch_ratio", 0.35)
        self.max_tick_seconds = config.get("control", {}).get("max_tick_seconds", 0.05)

        self._initial_view = self.rig.get_view_state()
        self.state = SessionState()
        self._build()
        self.fsm.start()

    def _build(self):
        """Wire the components to the current session record."""
        st = self.state
        self.filter = ContinuousControlFilter(st.control, self.control_config)
        self.puzzle = WorldDPuzzle(st.world_d, self.world_d_config, self.event_bus,
                                   on_rotate=self._rotate_world_d)
        self.fsm = WorldStateMachine(st, self.rig, self.assets, self.zone_config,
                                     self.event_bus, on_leave_d=self.puzzle.reset)

    def _rotate_world_d(self, delta: float):
        self.rig.rotate_model(WorldId.D, delta)

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------

    def on_landmarks(self, frame: Optional[HandFrame], now: float) -> None:
        """Landmark-arrival update. A missing frame counts as no hands."""
        st = self.state
        if not st.hand_control_enabled:
            return

        self.fsm.poll_pending()

        left = right = None
        if frame is not None:
            left = as_landmark_array(frame.left)
            right = as_landmark_array(frame.right)

        self.filter.update(right)

        ok = left is not None and is_ok_gesture(left, self.ok_pinch_ratio)
        self.fsm.update_gates(ok, now)

        if st.current_world == WorldId.D:
            self.puzzle.update(left, now)
        else:
            st.world_d.last_wrist_angle = None

    def on_tick(self, now: float) -> None:
        """Render-tick update."""
        st = self.state
        if st.last_tick is None:
            dt = _FIRST_TICK_SECONDS
        else:
            dt = min(max(now - st.last_tick, 0.0), self.max_tick_seconds)
        st.last_tick = now

        self.filter.apply(dt, self.rig, self.zone_config.min_zoom_distance,
                          self.fsm.max_distance())
        self.fsm.poll_pending()
        self.fsm.update_zones(self.rig.distance_to_target())

        if st.current_world == WorldId.D:
            self.puzzle.update_stress_hold(now)

        self.fsm.advance_growth()

    # -------------------------------------------------------------------------
    # Session control
    # -------------------------------------------------------------------------

    @property
    def current_world(self) -> WorldId:
        return self.state.current_world

    @property
    def hand_control_enabled(self) -> bool:
        return self.state.hand_control_enabled

    def enable_hand_control(self) -> None:
        st = self.state
        if st.hand_control_enabled:
            return
        st.hand_control_enabled = True
        st.error = None
        logger.info("Hand control enabled")
        self.event_bus.emit(Events.HAND_CONTROL_CHANGED, enabled=True)

    def disable_hand_control(self) -> None:
        """Neutralize all per-hand state and abandon any hold in progress."""
        st = self.state
        self.filter.release()
        self.fsm.abort_gates()
        self.puzzle.hand_lost()
        if not st.hand_control_enabled:
            return
        st.hand_control_enabled = False
        logger.info("Hand control disabled")
        self.event_bus.emit(Events.HAND_CONTROL_CHANGED, enabled=False)

    def report_camera_error(self, message: str) -> None:
        """Single user-visible error state. Hand control stays off until re-enabled."""
        logger.error("Camera unavailable: %s", message)
        self.state.error = message
        self.disable_hand_control()
        self.event_bus.emit(Events.CAMERA_ERROR, message=message)

    def reinitialize(self) -> None:
        """Reset the session in full and return the rig to world A's default view."""
        enabled = self.state.hand_control_enabled
        self.rig.reset(self._initial_view)
        self.assets.reset()
        self.state = SessionState(hand_control_enabled=enabled)
        self._build()
        self.fsm.start()
        logger.info("Scene reinitialized")
        self.event_bus.emit(Events.WORLD_CHANGED, previous=None, current=WorldId.A.value)

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def observables(self) -> dict:
        """Read-only snapshot for the HUD."""
        st = self.state
        return {
            "current_world": st.current_world.value,
            "gates": {
                world.value: {"unlocked": gate.unlocked, "progress": gate.progress}
                for world, gate in st.gates.items()
            },
            "world_d_rotation_progress": st.world_d.rotation_progress,
            "world_d_stress_progress": st.world_d.stress_hold_progress,
            "world_d_stress_active": st.world_d.stress_active,
            "deep_zone_active": st.zone.deep_zone_active,
            "deep_zone_reached": {w.value: v for w, v in st.deep_zone_reached.items()},
            "distance": self.rig.distance_to_target(),
            "pending": st.pending.target.value if st.pending else None,
            "hand_control_enabled": st.hand_control_enabled,
            "error": st.error,
        }
