"""
Right-hand continuous camera control: wrist motion pans, pinch zooms.

Two cadences, decoupled:
    update(right_hand)  - on every landmark frame, refreshes the targets
    apply(dt, rig, ...) - on every render tick, eases velocities toward
                          the targets and moves the camera
"""

import logging
from dataclasses import dataclass

import numpy as np

from handworlds.core.types import ContinuousControlState
from handworlds.detection.landmarks import WRIST, as_landmark_array
from handworlds.recognition.gestures import pinch_distance_2d

logger = logging.getLogger(__name__)


def _lerp(a, b, t):
    return a + (b - a) * t


@dataclass
class ControlConfig:
    """Continuous control tuning."""
    position_smoothing: float = 0.2
    pan_sensitivity: float = 140.0
    pan_dead_zone: float = 0.18
    pan_target_smoothing: float = 0.35
    velocity_smoothing: float = 0.12
    velocity_decay: float = 0.08
    zoom_in_threshold: float = 0.07
    zoom_in_range: float = 0.045
    zoom_out_threshold: float = 0.15
    zoom_out_range: float = 0.14
    zoom_speed_in: float = 36.0
    zoom_speed_out: float = 24.0
    max_speed: float = 2.0

    @classmethod
    def from_dict(cls, config: dict) -> "ControlConfig":
        """Create config from dictionary (YAML parsed)."""
        known = cls.__dataclass_fields__
        return cls(**{k: v for k, v in (config or {}).items() if k in known})


class ContinuousControlFilter:
    """Smooths the right hand into pan and zoom velocities."""

    def __init__(self, state: ContinuousControlState, config: ControlConfig = None):
        self.state = state
        self.config = config or ControlConfig()

    def zoom_intent(self, pinch: float) -> float:
        """Pinch closed -> positive (zoom in), spread -> negative (zoom out)."""
        cfg = self.config
        if pinch < cfg.zoom_in_threshold:
            return float(np.clip((cfg.zoom_in_threshold - pinch) / cfg.zoom_in_range, 0.0, 1.0))
        if pinch > cfg.zoom_out_threshold:
            return -float(np.clip((pinch - cfg.zoom_out_threshold) / cfg.zoom_out_range, 0.0, 1.0))
        return 0.0

    def update(self, right_hand) -> None:
        """Landmark-arrival update from the right hand (None = absent)."""
        arr = as_landmark_array(right_hand)
        if arr is None:
            self.release()
            return

        cfg = self.config
        st = self.state
        st.active = True
        raw = np.array(arr[WRIST, :2], dtype=np.float64)

        if st.smoothed_pos is None:
            smoothed = raw
        else:
            smoothed = _lerp(np.asarray(st.smoothed_pos), raw, cfg.position_smoothing)
        st.smoothed_pos = (float(smoothed[0]), float(smoothed[1]))

        if st.previous_pos is not None:
            delta = (smoothed - np.asarray(st.previous_pos)) * cfg.pan_sensitivity
            delta[np.abs(delta) < cfg.pan_dead_zone] = 0.0
            st.pan_target = _lerp(st.pan_target, delta, cfg.pan_target_smoothing)
        else:
            st.pan_target = np.zeros(2)

        st.previous_pos = st.smoothed_pos
        st.zoom_target = self.zoom_intent(pinch_distance_2d(arr))

    def release(self) -> None:
        """Right hand gone: drop positions, targets and velocities."""
        st = self.state
        st.previous_pos = None
        st.smoothed_pos = None
        st.pan_target = np.zeros(2)
        st.pan_velocity = np.zeros(2)
        st.zoom_target = 0.0
        st.zoom_velocity = 0.0
        st.active = False

    def step_velocities(self) -> None:
        """Ease velocities toward targets while active, decay otherwise."""
        st = self.state
        if st.active:
            t = self.config.velocity_smoothing
            st.pan_velocity = _lerp(st.pan_velocity, st.pan_target, t)
            st.zoom_velocity = _lerp(st.zoom_velocity, st.zoom_target, t)
        else:
            t = self.config.velocity_decay
            st.pan_velocity = _lerp(st.pan_velocity, np.zeros(2), t)
            st.zoom_velocity = _lerp(st.zoom_velocity, 0.0, t)

    def apply(self, dt: float, rig, min_distance: float, max_distance: float) -> None:
        """Render-tick update: smooth velocities and move the camera rig."""
        self.step_velocities()
        st = self.state
        if not st.active:
            return

        speed = min(dt * 60.0, self.config.max_speed)

        offset = (rig.right_vector() * (st.pan_velocity[0] * speed)
                  + rig.up_vector() * (-st.pan_velocity[1] * speed))
        if np.any(offset):
            rig.pan(offset)

        zoom_delta = st.zoom_velocity * speed
        if zoom_delta > 0:
            step = zoom_delta * self.config.zoom_speed_in
        else:
            step = zoom_delta * self.config.zoom_speed_out
        if step == 0:
            return

        # Clamp to the zoom limits; the camera may rest exactly on one
        current = rig.distance_to_target()
        step = current - float(np.clip(current - step, min_distance, max_distance))
        if step != 0:
            rig.dolly(step)
