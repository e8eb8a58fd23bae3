import asyncio
import json
import logging
import time
from threading import RLock
from typing import Any, Callable, Dict, NamedTuple, Optional

from .cache import Cache

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300

_MISSING = object()


class CacheEntry(NamedTuple):
    value: Any
    created_at: float  # milliseconds on the cache clock
    ttl: float  # milliseconds


class TTLCache(Cache):
    """
    In-process cache with per-entry TTL, per-key expiry timers and usage counters.

    Expiry rules:
      - created_at + ttl is the authoritative expiry instant. get() re-checks it and
        evicts a stale entry eagerly, so correctness never depends on a timer firing.
      - set() schedules a one-shot delete(key) on the running asyncio loop. Outside an
        event loop no timer is scheduled; eager eviction and cleanup() cover that case.
      - Re-setting a key cancels its previous timer.

    Counters (hits, misses, sets, deletes) only ever grow; clear() leaves them alone.
    """

    def __init__(self, default_ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._data: Dict[str, CacheEntry] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._stats = {"hits": 0, "misses": 0, "sets": 0, "deletes": 0}
        self._lock = RLock()

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _is_expired(self, entry: CacheEntry, now_ms: float) -> bool:
        return now_ms - entry.created_at > entry.ttl

    def _schedule_expiry(self, key: str, ttl_seconds: float) -> Optional[asyncio.TimerHandle]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        return loop.call_later(ttl_seconds, self.delete, key)

    def _cancel_timer(self, key: str) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        if not isinstance(key, str) or not key:
            raise ValueError("cache key must be a non-empty string")
        if ttl_seconds is None:
            ttl_seconds = self.default_ttl_seconds
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        with self._lock:
            self._cancel_timer(key)
            self._data[key] = CacheEntry(value=value, created_at=self._now_ms(), ttl=ttl_seconds * 1000)
            timer = self._schedule_expiry(key, ttl_seconds)
            if timer is not None:
                self._timers[key] = timer
            self._stats["sets"] += 1

        logger.debug("Cache SET: %s (ttl=%ss)", key, ttl_seconds)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                self._stats["misses"] += 1
                logger.debug("Cache MISS: %s", key)
                return default

            if self._is_expired(entry, self._now_ms()):
                self.delete(key)
                self._stats["misses"] += 1
                logger.debug("Cache EXPIRED: %s", key)
                return default

            self._stats["hits"] += 1
            logger.debug("Cache HIT: %s", key)
            return entry.value

    def delete(self, key: str) -> bool:
        with self._lock:
            removed = self._data.pop(key, None) is not None
            self._cancel_timer(key)
            if removed:
                self._stats["deletes"] += 1
                logger.debug("Cache DELETE: %s", key)
            return removed

    def clear(self) -> None:
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
            removed = len(self._data)
            self._data.clear()
        logger.info("Cache cleared: %d items removed", removed)

    def has(self, key: str) -> bool:
        # Unknown keys touch no counter; stored ones go through get() for eager eviction
        with self._lock:
            if key not in self._data:
                return False
            return self.get(key, _MISSING) is not _MISSING

    def size(self) -> int:
        with self._lock:
            return len(self._data)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            stats = dict(self._stats)
            accesses = stats["hits"] + stats["misses"]
            hit_rate = f"{stats['hits'] / accesses * 100:.2f}%" if accesses else "0%"
            stats.update(hitRate=hit_rate, size=len(self._data), memoryUsage=self._memory_usage())
        return stats

    def _memory_usage(self) -> str:
        """Rough footprint: JSON size of every entry plus its key, in kilobytes."""
        total = 0
        for key, entry in self._data.items():
            total += len(json.dumps(entry._asdict(), default=str)) + len(key)
        return f"{total / 1024:.2f} KB"

    def cleanup(self) -> int:
        """Evict every expired entry and return how many were removed."""
        with self._lock:
            now_ms = self._now_ms()
            expired = [key for key, entry in self._data.items() if self._is_expired(entry, now_ms)]
            removed = sum(1 for key in expired if self.delete(key))

        if removed:
            logger.info("Cache cleanup: %d expired items removed", removed)
        return removed

    def __repr__(self) -> str:
        return f"TTLCache(default_ttl_seconds={self.default_ttl_seconds}, size={len(self._data)})"
