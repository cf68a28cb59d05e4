"""Shared types and events. The session controller lives in handworlds.core.controller."""
from .types import (
    WorldId, WorldProfile, WORLD_PROFILES, HandFrame, ViewState,
    GateState, ZoneState, ContinuousControlState, WorldDState, SessionState,
)
from .events import EventBus, Events

__all__ = [
    "WorldId",
    "WorldProfile",
    "WORLD_PROFILES",
    "HandFrame",
    "ViewState",
    "GateState",
    "ZoneState",
    "ContinuousControlState",
    "WorldDState",
    "SessionState",
    "EventBus",
    "Events",
]
