"""
Headless orbit-camera rig standing in for the 3D renderer.

Holds the camera position, orbit target, per-world visibility, zoom
limits and the world-D model yaw. A real renderer can subclass this and
push the values to its scene graph in the hook methods.
"""

import logging
from typing import Dict, Optional

import numpy as np

from handworlds.core.types import ViewState, WorldId, WORLD_PROFILES

logger = logging.getLogger(__name__)

_WORLD_UP = np.array([0.0, 1.0, 0.0])


def _normalize(v: np.ndarray) -> np.ndarray:
    n = np.linalg.norm(v)
    if n <= 1e-12:
        return np.zeros_like(v)
    return v / n


class OrbitRig:
    """Camera + orbit target, with the queries the world FSM needs."""

    def __init__(self, default_view: ViewState, min_distance: float = 50.0,
                 max_distance: float = 2000.0):
        self.position = default_view.position.copy()
        self.target = default_view.target.copy()
        self._global_min = min_distance
        self._global_max = max_distance
        self._base_distance = default_view.distance or max_distance
        self.min_distance = min_distance
        self.max_distance = max_distance
        self.visible_group: Optional[str] = WORLD_PROFILES[WorldId.A].visibility_group
        self.model_yaw: Dict[WorldId, float] = {w: 0.0 for w in WorldId}

    @classmethod
    def from_config(cls, zones: dict) -> "OrbitRig":
        view = ViewState(zones.get("default_camera_position", [0.0, -200.0, 350.0]),
                         zones.get("default_camera_target", [0.0, 0.0, 0.0]))
        return cls(view, zones.get("min_zoom_distance", 50.0),
                   zones.get("max_zoom_distance", 2000.0))

    # -------------------------------------------------------------------------
    # View state
    # -------------------------------------------------------------------------

    def get_view_state(self) -> ViewState:
        return ViewState(self.position.copy(), self.target.copy())

    def set_view_state(self, view: ViewState) -> None:
        self.position = view.position.copy()
        self.target = view.target.copy()

    def distance_to_target(self) -> float:
        return float(np.linalg.norm(self.position - self.target))

    def set_distance(self, distance: float) -> None:
        """Move the camera along its current offset to `distance`."""
        self.set_view_state(self.get_view_state().rescaled(distance))

    # -------------------------------------------------------------------------
    # Camera basis
    # -------------------------------------------------------------------------

    def forward_vector(self) -> np.ndarray:
        return _normalize(self.target - self.position)

    def right_vector(self) -> np.ndarray:
        right = _normalize(np.cross(self.forward_vector(), _WORLD_UP))
        if not np.any(right):
            # Looking straight up or down
            right = np.array([1.0, 0.0, 0.0])
        return right

    def up_vector(self) -> np.ndarray:
        return _normalize(np.cross(self.right_vector(), self.forward_vector()))

    def pan(self, offset: np.ndarray) -> None:
        """Translate camera and target together; look direction unchanged."""
        self.position = self.position + offset
        self.target = self.target + offset

    def dolly(self, step: float) -> None:
        """Move the camera along its view direction (positive = closer)."""
        self.position = self.position + self.forward_vector() * step

    # -------------------------------------------------------------------------
    # Per-world
    # -------------------------------------------------------------------------

    def get_max_zoom_distance(self, world: WorldId) -> float:
        profile = WORLD_PROFILES[world]
        base = self._base_distance if profile.scale_from_default else self._global_max
        return base * profile.max_distance_factor

    def apply_zoom_limits(self, world: WorldId) -> None:
        self.min_distance = self._global_min
        self.max_distance = self.get_max_zoom_distance(world)

    def set_world_visibility(self, world: WorldId) -> None:
        self.visible_group = WORLD_PROFILES[world].visibility_group
        logger.debug("Visible group: %s (world %s)", self.visible_group, world.value)

    def rotate_model(self, world: WorldId, delta: float) -> None:
        self.model_yaw[world] += delta

    def reset(self, view: ViewState) -> None:
        """Back to `view` with every model at rest."""
        self.set_view_state(view)
        self.model_yaw = {w: 0.0 for w in WorldId}
