# app/services/cache_sweeper.py

import asyncio
import logging
from contextlib import suppress
from typing import Awaitable, Callable, Optional

from app.config import CACHE_STATS_INTERVAL_SECONDS, CACHE_STATS_LOGGING, CACHE_SWEEP_INTERVAL_SECONDS
from app.services.cache import Cache

logger = logging.getLogger(__name__)


class CacheSweeper:
    """
    Periodic background worker that sweeps expired cache entries and logs cache stats.

    Per-key timers and eager eviction in get() already keep reads correct; the sweep
    only reclaims memory for keys nobody asks for again.
    """

    def __init__(
        self,
        cache: Cache,
        interval_seconds: Optional[float] = None,
        stats_interval_seconds: Optional[float] = None,
        log_stats: bool = CACHE_STATS_LOGGING,
    ) -> None:
        self.cache = cache
        self.interval_seconds = interval_seconds or CACHE_SWEEP_INTERVAL_SECONDS
        self.stats_interval_seconds = stats_interval_seconds or CACHE_STATS_INTERVAL_SECONDS
        self.log_stats = log_stats
        self._tasks: list[asyncio.Task] = []
        self._stop: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    async def start(self) -> None:
        """Start the sweep loop (and the stats loop when enabled)."""
        if self._tasks:
            return  # Already started
        # Bound to the loop that runs start(); tests start the same app under several loops
        self._stop = asyncio.Event()
        logger.info(
            "Starting CacheSweeper (interval=%s sec, stats=%s)...",
            self.interval_seconds,
            self.stats_interval_seconds if self.log_stats else "off",
        )
        self._tasks.append(
            asyncio.create_task(self._run("sweep", self.interval_seconds, self._sweep_cycle), name="cache-sweeper")
        )
        if self.log_stats:
            self._tasks.append(
                asyncio.create_task(
                    self._run("stats", self.stats_interval_seconds, self._stats_cycle), name="cache-stats"
                )
            )

    async def stop(self) -> None:
        """Signal the loops to stop and wait for them to finish."""
        logger.info("Stopping CacheSweeper...")
        if self._stop is not None:
            self._stop.set()
        for task in self._tasks:
            try:
                await asyncio.wait_for(task, timeout=5)
            except asyncio.TimeoutError:
                logger.warning("%s did not stop in time; cancelling...", task.get_name())
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
        self._tasks = []
        logger.info("CacheSweeper stopped.")

    async def _run(self, name: str, interval: float, cycle: Callable[[], Awaitable[None]]) -> None:
        """Run `cycle` every `interval` seconds until stop is requested."""
        try:
            while not self._stop.is_set():
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    pass
                if self._stop.is_set():
                    break
                try:
                    await cycle()
                except Exception:
                    logger.exception("Cache %s cycle failed with an exception.", name)
        finally:
            logger.info("Cache %s loop exiting.", name)

    async def _sweep_cycle(self) -> None:
        self.run_once()

    async def _stats_cycle(self) -> None:
        logger.info("Cache statistics: %s", self.cache.get_stats())

    def run_once(self) -> int:
        """One full-table sweep; returns the number of evicted entries."""
        removed = self.cache.cleanup()
        if removed:
            logger.info("Cache sweep removed %d expired entries", removed)
        return removed
