"""
Structured logging with world-transition event logging.
"""

import os
import logging
import logging.handlers
import time
from functools import wraps


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure structured logging for the application."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-25s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class TransitionLogger:
    """Records world switches and unlocks published on the event bus."""

    def __init__(self, event_bus=None):
        self.logger = logging.getLogger("world_events")
        self._history = []
        if event_bus is not None:
            self.attach(event_bus)

    def attach(self, event_bus):
        from handworlds.core.events import Events

        event_bus.subscribe(Events.WORLD_CHANGED, self.log_world_change)
        event_bus.subscribe(Events.GATE_UNLOCKED, self.log_unlock)

    def log_world_change(self, previous=None, current=None, **_):
        entry = {
            "timestamp": time.time(),
            "kind": "switch",
            "previous": previous,
            "current": current,
        }
        self._history.append(entry)
        self.logger.info("World: %-2s -> %-2s", previous, current)

    def log_unlock(self, world=None, auto=False, **_):
        entry = {
            "timestamp": time.time(),
            "kind": "unlock",
            "world": world,
            "auto": auto,
        }
        self._history.append(entry)
        self.logger.info("Unlock: %-2s | %s", world, "deep zone" if auto else "hold gesture")

    def get_history(self, last_n=None):
        """Get recent transition history."""
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def total_switches(self):
        return sum(1 for e in self._history if e["kind"] == "switch")


def log_timing(func):
    """Decorator to log function execution time."""
    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("%s took %.2fms", func.__name__, elapsed)
        return result

    return wrapper
