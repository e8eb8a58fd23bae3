import logging
from typing import Any, Dict, Optional

from fastapi import Request

from .cache import Cache
from .ttl_cache import TTLCache
from app.config import CACHE_BACKEND, CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


def build_cache(backend: Optional[str] = None) -> Cache:
    """
    Build the cache instance for one application process:
      - "memory" -> in-process TTL cache (default)
      - "none"   -> no-op backend (always misses)

    The instance is created once in create_app() and stored on app.state;
    nothing here keeps a module-level singleton.
    """
    backend = (backend or CACHE_BACKEND).lower()
    if backend == "none":
        return NullCache()
    if backend != "memory":
        logger.warning("Unknown CACHE_BACKEND %r; falling back to memory", backend)
    return TTLCache(default_ttl_seconds=CACHE_TTL_SECONDS)


def get_cache(request: Request) -> Cache:
    """FastAPI dependency returning the cache owned by the running app."""
    return request.app.state.cache


class NullCache(Cache):
    """No-op cache used when caching is disabled."""

    def __init__(self) -> None:
        self._misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        self._misses += 1
        return default

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        pass

    def delete(self, key: str) -> bool:
        return False

    def clear(self) -> None:
        pass

    def has(self, key: str) -> bool:
        return False

    def size(self) -> int:
        return 0

    def get_stats(self) -> Dict[str, Any]:
        return {
            "hits": 0,
            "misses": self._misses,
            "sets": 0,
            "deletes": 0,
            "hitRate": "0%",
            "size": 0,
            "memoryUsage": "0.00 KB",
        }

    def cleanup(self) -> int:
        return 0
