"""
Lightweight event bus for decoupled inter-module communication.

The world state machine, gates and world-D puzzle publish what happened;
the HUD, transition logger and application shell subscribe.

Usage:
    bus = EventBus()
    bus.subscribe(Events.WORLD_CHANGED, on_world_changed)
    bus.emit(Events.WORLD_CHANGED, previous="A", current="B")
"""

import time
import logging
import threading
from collections import defaultdict, deque
from typing import Callable

logger = logging.getLogger(__name__)

_MAX_HISTORY = 100


class EventBus:
    """Process-wide publish/subscribe hub for world and puzzle events.

    Dispatch is synchronous on the control thread, highest priority first.
    A failing handler is logged and the remaining handlers still run.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._listeners = defaultdict(list)  # name -> [(priority, callback)]
            cls._instance._lock = threading.Lock()
            cls._instance._history = deque(maxlen=_MAX_HISTORY)
        return cls._instance

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register `callback(**data)` for `event_name`; higher priority runs first."""
        with self._lock:
            handlers = self._listeners[event_name]
            handlers.append((priority, callback))
            handlers.sort(key=lambda x: -x[0])
        logger.debug("Subscribed to '%s': %s (priority=%d)",
                     event_name, getattr(callback, "__name__", callback), priority)

    def emit(self, event_name: str, **data):
        with self._lock:
            handlers = list(self._listeners.get(event_name, ()))
        self._history.append({"event": event_name, "time": time.monotonic(), "data": data})

        for _priority, callback in handlers:
            try:
                callback(**data)
            except Exception as e:
                logger.error("Event handler error [%s -> %s]: %s",
                             event_name, getattr(callback, "__name__", callback), e)

    def get_history(self, last_n: int = 10, event_name: str = None) -> list:
        """Most recent events, oldest first, optionally filtered by name."""
        history = [e for e in self._history if event_name is None or e["event"] == event_name]
        return history[-last_n:]

    def reset(self):
        """Drop every listener and the history (scene teardown, tests)."""
        with self._lock:
            self._listeners.clear()
        self._history.clear()


# =============================================================================
# Standard Event Names
# =============================================================================

class Events:
    """Standard event names used throughout the system."""

    # World progression
    WORLD_CHANGED = "world_changed"
    GATE_PROGRESS = "gate_progress"
    GATE_UNLOCKED = "gate_unlocked"
    DEEP_ZONE_REACHED = "deep_zone_reached"
    TRANSITION_PENDING = "transition_pending"
    TRANSITION_ABANDONED = "transition_abandoned"

    # World D puzzle
    STRESS_CHANGED = "stress_changed"
    STRESS_HOLD_COMPLETE = "stress_hold_complete"
    ROTATION_COMPLETE = "rotation_complete"

    # Input / system
    HAND_CONTROL_CHANGED = "hand_control_changed"
    CAMERA_ERROR = "camera_error"
    SYSTEM_STARTED = "system_started"
    SYSTEM_SHUTDOWN = "system_shutdown"
