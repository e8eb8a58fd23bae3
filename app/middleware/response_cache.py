# app/middleware/response_cache.py

import json
import logging
from typing import Callable, Iterable, Optional

from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.auth import resolve_user_id
from app.services.cache import Cache
from app.services.ttl_cache import DEFAULT_TTL_SECONDS

logger = logging.getLogger(__name__)

KeyGenerator = Callable[[Request], str]

_MISSING = object()


def default_cache_key(request: Request) -> str:
    """METHOD:path?query:user, so one user's cached data is never served to another."""
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return f"{request.method}:{path}:{resolve_user_id(request) or 'anonymous'}"


class ResponseCacheMiddleware:
    """
    Memoizes successful JSON responses of GET requests.

    Flow:
      - Non-GET (and non-HTTP) requests pass through untouched.
      - Hit: the stored body is sent right away and the downstream app is never called.
      - Miss: the downstream app runs with a wrapped `send`. The status comes from
        http.response.start; body chunks are collected and, on the last chunk, a 2xx
        JSON body is stored before the chunk is forwarded.

    Two concurrent misses on the same key both run the handler; the last store wins.
    """

    def __init__(
        self,
        app: ASGIApp,
        cache: Cache,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        key_generator: Optional[KeyGenerator] = None,
        path_prefixes: Optional[Iterable[str]] = None,
    ) -> None:
        self.app = app
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.key_generator = key_generator or default_cache_key
        self.path_prefixes = tuple(path_prefixes) if path_prefixes else None

    def _applies(self, scope: Scope) -> bool:
        if scope["type"] != "http" or scope["method"] != "GET":
            return False
        if self.path_prefixes is None:
            return True
        return scope["path"].startswith(self.path_prefixes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if not self._applies(scope):
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        key = self.key_generator(request)

        cached = self.cache.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug("Serving from cache: %s", key)
            response = JSONResponse(cached, headers={"X-Cache": "HIT"})
            await response(scope, receive, send)
            return

        cacheable = False
        chunks: list[bytes] = []

        async def send_and_store(message: Message) -> None:
            nonlocal cacheable
            if message["type"] == "http.response.start":
                status = message["status"]
                content_type = dict(message.get("headers", [])).get(b"content-type", b"")
                cacheable = 200 <= status < 300 and content_type.startswith(b"application/json")
            elif message["type"] == "http.response.body" and cacheable:
                chunks.append(message.get("body", b""))
                if not message.get("more_body", False):
                    self._store(key, b"".join(chunks))
            await send(message)

        await self.app(scope, receive, send_and_store)

    def _store(self, key: str, body: bytes) -> None:
        try:
            data = json.loads(body)
        except ValueError:
            logger.warning("Response for %s is not valid JSON; not cached", key)
            return
        self.cache.set(key, data, self.ttl_seconds)
        logger.debug("Response cached: %s (ttl=%ss)", key, self.ttl_seconds)


def cache_middleware(
    cache: Cache,
    ttl_seconds: float = DEFAULT_TTL_SECONDS,
    key_generator: Optional[KeyGenerator] = None,
    path_prefixes: Optional[Iterable[str]] = None,
) -> Middleware:
    """Build a middleware entry for FastAPI(middleware=[...]) / Starlette(middleware=[...])."""
    return Middleware(
        ResponseCacheMiddleware,
        cache=cache,
        ttl_seconds=ttl_seconds,
        key_generator=key_generator,
        path_prefixes=path_prefixes,
    )
