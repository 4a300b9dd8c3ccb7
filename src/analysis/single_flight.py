# src/analysis/single_flight.py — v1
"""Per-key single-flight: at most one running task per key.

The first caller for a key starts the work; callers arriving while it runs
await the same task instead of starting another. The key is registered
before the first suspension point and released by the task itself when it
finishes, fails or is cancelled. A caller that gives up waiting does not
cancel the shared task, so an abandoned generation still completes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Registry of in-flight tasks keyed by an arbitrary hashable."""

    def __init__(self) -> None:
        self._inflight: dict[Hashable, asyncio.Task[T]] = {}

    def in_flight(self, key: Hashable) -> bool:
        return key in self._inflight

    async def run(self, key: Hashable, fn: Callable[[], Awaitable[T]]) -> T:
        """Run ``fn`` for ``key`` unless a run is already in flight, then await it."""
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run_and_release(key, fn))
            self._inflight[key] = task
        else:
            logger.info("Generation already in progress for %s, joining it", key)
        return await asyncio.shield(task)

    async def _run_and_release(self, key: Hashable, fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fn()
        finally:
            self._inflight.pop(key, None)
