"""
services/cleanup.py
-------------------

Periodic expiry sweep for the product cache.

The cache itself never schedules anything; expired entries are only
removed when read or when :meth:`TemporalCache.cleanup` runs.  The
application owns this timer, starts it in the FastAPI lifespan and
stops it on shutdown.  Sweeps run on the event loop, so they never
interleave with a cache operation in progress.
"""

from __future__ import annotations

import asyncio
import json
from typing import Optional

from storefront.logging_config import logger
from storefront.utils.cache import TemporalCache


class CleanupTask:
    """Calls ``cache.cleanup()`` every ``interval`` seconds."""

    def __init__(self, cache: TemporalCache, interval: float = 60.0) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.cache = cache
        self.interval = interval
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def sweep(self) -> int:
        removed = self.cache.cleanup()
        if removed:
            logger.debug(json.dumps({"event": "cache_swept", "removed": removed, "size": len(self.cache)}))
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.sweep()
