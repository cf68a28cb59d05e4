"""
Asset-loading collaborator: per-world model readiness and growth value.

Worlds without a registered loader are always ready. A registered loader
runs once on a small worker pool; `ensure_model_ready` hands back the
same Future until it resolves, so callers can poll it from the control
thread without blocking.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Optional

from handworlds.core.types import WorldId

logger = logging.getLogger(__name__)


def load_failed(handle: Future) -> bool:
    """True once a handle finished without a usable model."""
    if not handle.done():
        return False
    return handle.cancelled() or handle.exception() is not None


def _completed(value=None) -> Future:
    future = Future()
    future.set_result(value)
    return future


class AssetRegistry:
    """Tracks which world models are loaded and the current growth value."""

    def __init__(self, max_workers: int = 1):
        self._loaders: Dict[WorldId, Callable[[], object]] = {}
        self._handles: Dict[WorldId, Future] = {}
        self._executor: Optional[ThreadPoolExecutor] = None
        self._max_workers = max_workers
        self.growth_value = 0.0

    def register_loader(self, world: WorldId, loader: Callable[[], object]) -> None:
        """Register a callable that loads `world`'s model; drops any cached handle."""
        self._loaders[world] = loader
        self._handles.pop(world, None)

    def ensure_model_ready(self, world: WorldId) -> Future:
        """Start loading `world` if needed and return its handle."""
        handle = self._handles.get(world)
        if handle is not None and not load_failed(handle):
            return handle

        loader = self._loaders.get(world)
        if loader is None:
            handle = _completed(world)
        else:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self._max_workers,
                                                    thread_name_prefix="asset-loader")
            logger.info("Loading model for world %s", world.value)
            handle = self._executor.submit(loader)
        self._handles[world] = handle
        return handle

    def set_handle(self, world: WorldId, handle: Future) -> None:
        """Install an externally managed load handle for `world`."""
        self._handles[world] = handle

    def is_ready(self, world: WorldId) -> bool:
        handle = self._handles.get(world)
        if handle is None:
            return world not in self._loaders
        return handle.done() and not load_failed(handle)

    def preload(self, *worlds: WorldId) -> None:
        for world in worlds:
            self.ensure_model_ready(world)

    def set_growth_value(self, value: float) -> None:
        self.growth_value = float(value)

    def reset(self) -> None:
        """Forget loaded models (scene reinitialized)."""
        self._handles.clear()

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
