"""World state machine, world-D puzzle and the rendering/asset collaborators."""
from .scene import OrbitRig
from .assets import AssetRegistry, load_failed
from .zones import WorldStateMachine, ZoneConfig
from .world_d import WorldDPuzzle, WorldDConfig

__all__ = [
    "OrbitRig",
    "AssetRegistry",
    "load_failed",
    "WorldStateMachine",
    "ZoneConfig",
    "WorldDPuzzle",
    "WorldDConfig",
]
