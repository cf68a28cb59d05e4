"""HUD overlay."""
from .hud import Hud

__all__ = ["Hud"]
