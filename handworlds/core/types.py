"""
Shared domain types for the Hand Worlds system.

Centralizes enums, data classes and the per-session state record used
across modules to eliminate circular imports and keep one coherent
picture of the session.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Set, Tuple

import numpy as np


# =============================================================================
# Worlds
# =============================================================================

class WorldId(Enum):
    """The four worlds, ordered by unlock progression A < B < C < D."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"

    @property
    def rank(self) -> int:
        return _WORLD_ORDER.index(self)

    @property
    def predecessor(self) -> Optional["WorldId"]:
        if self.rank == 0:
            return None
        return _WORLD_ORDER[self.rank - 1]

    @property
    def successor(self) -> Optional["WorldId"]:
        if self.rank == len(_WORLD_ORDER) - 1:
            return None
        return _WORLD_ORDER[self.rank + 1]

    def __lt__(self, other):
        if not isinstance(other, WorldId):
            return NotImplemented
        return self.rank < other.rank


_WORLD_ORDER = (WorldId.A, WorldId.B, WorldId.C, WorldId.D)


@dataclass(frozen=True)
class WorldProfile:
    """Per-world constants, looked up by WorldId."""
    max_distance_factor: float
    scale_from_default: bool      # False = factor applies to the global max
    reentry_margin: float         # Forward re-entry arm margin into this world
    visibility_group: str         # Which scene group renders this world


WORLD_PROFILES: Dict[WorldId, WorldProfile] = {
    WorldId.A: WorldProfile(1.0, False, 0.0, "particles"),
    WorldId.B: WorldProfile(1.1, True, 20.0, "particles"),
    WorldId.C: WorldProfile(1.1, True, 20.0, "model_c"),
    WorldId.D: WorldProfile(1.05, True, 20.0, "model_d"),
}

# Worlds where the deep zone is an exploration objective
DEEP_ZONE_WORLDS = (WorldId.A, WorldId.B, WorldId.C)

# Fully grown particle field in worlds A and B
MAX_GROWTH = 0.85


# =============================================================================
# Landmarks
# =============================================================================

NUM_LANDMARKS = 21

LEFT = "Left"
RIGHT = "Right"


class HandFrame:
    """Zero, one or two landmark sets for a single camera frame.

    Each set is a (21, 3) float array of normalized x, y and relative z.
    Labels are unique within a frame.
    """

    __slots__ = ("left", "right", "timestamp")

    def __init__(self, left: Optional[np.ndarray] = None,
                 right: Optional[np.ndarray] = None,
                 timestamp: float = 0.0):
        self.left = left
        self.right = right
        self.timestamp = timestamp

    @property
    def hand_count(self) -> int:
        return int(self.left is not None) + int(self.right is not None)

    @property
    def is_empty(self) -> bool:
        return self.hand_count == 0

    def __repr__(self):
        return (f"HandFrame(left={self.left is not None}, "
                f"right={self.right is not None}, t={self.timestamp:.3f})")


# =============================================================================
# Camera view
# =============================================================================

class ViewState:
    """Camera position plus orbit target."""

    __slots__ = ("position", "target")

    def __init__(self, position, target):
        self.position = np.array(position, dtype=np.float64)
        self.target = np.array(target, dtype=np.float64)

    def copy(self) -> "ViewState":
        return ViewState(self.position.copy(), self.target.copy())

    @property
    def distance(self) -> float:
        return float(np.linalg.norm(self.position - self.target))

    def rescaled(self, distance: float) -> "ViewState":
        """Same look direction, camera moved to `distance` from the target."""
        offset = self.position - self.target
        length = np.linalg.norm(offset)
        if length <= 0:
            return self.copy()
        return ViewState(self.target + offset * (distance / length), self.target.copy())

    def __repr__(self):
        return f"ViewState(pos={self.position.tolist()}, target={self.target.tolist()})"


# =============================================================================
# Per-session state
# =============================================================================

@dataclass
class GateState:
    """Unlock gate for one world. `unlocked` never goes back to False."""
    unlocked: bool = False
    hold_start: Optional[float] = None
    progress: float = 0.0


@dataclass
class ZoneState:
    """Zone flags for the active world; rebuilt on every world switch."""
    deep_zone_active: bool = False
    return_armed: bool = False
    return_distance: Optional[float] = None
    entry_armed: bool = False


@dataclass
class ContinuousControlState:
    """Right-hand pan/zoom smoothing state."""
    smoothed_pos: Optional[Tuple[float, float]] = None
    previous_pos: Optional[Tuple[float, float]] = None
    pan_target: np.ndarray = field(default_factory=lambda: np.zeros(2))
    pan_velocity: np.ndarray = field(default_factory=lambda: np.zeros(2))
    zoom_target: float = 0.0
    zoom_velocity: float = 0.0
    active: bool = False


@dataclass
class WorldDState:
    """Stress / rotation puzzle inside world D."""
    rotation_accum: float = 0.0
    rotation_progress: float = 0.0
    stress_active: bool = False
    stress_hold_start: Optional[float] = None
    stress_hold_progress: float = 0.0
    smoothed_fist_strength: float = 0.0
    last_wrist_angle: Optional[float] = None


@dataclass
class PendingTransition:
    """A world switch waiting on an asset load."""
    target: WorldId
    prerequisite: WorldId
    handle: object


def _gate_table() -> Dict[WorldId, GateState]:
    return {WorldId.B: GateState(), WorldId.C: GateState(), WorldId.D: GateState()}


@dataclass
class SessionState:
    """Everything the two callbacks read and write, in one place."""
    current_world: WorldId = WorldId.A
    gates: Dict[WorldId, GateState] = field(default_factory=_gate_table)
    zone: ZoneState = field(default_factory=ZoneState)
    views: Dict[WorldId, ViewState] = field(default_factory=dict)
    default_view: Optional[ViewState] = None
    visited: Set[WorldId] = field(default_factory=lambda: {WorldId.A})
    deep_zone_reached: Dict[WorldId, bool] = field(
        default_factory=lambda: {w: False for w in DEEP_ZONE_WORLDS})
    control: ContinuousControlState = field(default_factory=ContinuousControlState)
    world_d: WorldDState = field(default_factory=WorldDState)
    growth: Dict[WorldId, float] = field(
        default_factory=lambda: {WorldId.A: 0.0, WorldId.B: MAX_GROWTH})
    growth_complete: bool = False
    pending: Optional[PendingTransition] = None
    hand_control_enabled: bool = True
    error: Optional[str] = None
    last_tick: Optional[float] = None

    def is_unlocked(self, world: WorldId) -> bool:
        if world == WorldId.A:
            return True
        return self.gates[world].unlocked
