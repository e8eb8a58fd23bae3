# tests/conftest.py
import asyncio
import json
import os
import pytest
from fastapi.testclient import TestClient

# In-memory SQLite for tests (single shared connection, see app/database.py).
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("CACHE_BACKEND", "memory")

from app.main import create_app  # import after env is set
from app.database import Base, SessionLocal, engine
from app.services.ttl_cache import TTLCache


class FakeClock:
    """Manually advanced clock (seconds) injected into TTLCache."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePubSub:
    def __init__(self):
        self.queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    async def listen(self):
        while not self.closed:
            payload = await self.queue.get()
            yield {"type": "message", "data": payload}


class FakeBus:
    """In-memory stand-in for RedisBus: records publishes and fans out to open subscribers."""

    def __init__(self):
        self.published: list[tuple[str, dict]] = []
        self.subscribers: dict[str, list[FakePubSub]] = {}
        self.fail_subscribe = False

    async def publish(self, user_id: str, payload: dict) -> None:
        self.published.append((user_id, payload))
        for sub in self.subscribers.get(user_id, []):
            sub.queue.put_nowait(json.dumps(payload))

    async def open_subscriber(self, user_id: str) -> FakePubSub:
        if self.fail_subscribe:
            raise ConnectionError("redis down")
        sub = FakePubSub()
        self.subscribers.setdefault(user_id, []).append(sub)
        return sub

    async def close_subscriber(self, pubsub: FakePubSub) -> None:
        pubsub.closed = True
        for subs in self.subscribers.values():
            if pubsub in subs:
                subs.remove(pubsub)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(clock=clock)


@pytest.fixture
def fake_bus(monkeypatch):
    bus = FakeBus()

    def _get_bus():
        return bus

    # Patch all import sites
    monkeypatch.setattr("app.services.stream_bus.get_stream_bus", _get_bus, raising=True)
    monkeypatch.setattr("app.routers.stream.get_stream_bus", _get_bus, raising=True)
    return bus


@pytest.fixture
def db_tables():
    """Create all tables before the test and drop them afterwards."""
    Base.metadata.create_all(engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(engine)


@pytest.fixture
def db_session(db_tables):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app(cache, db_tables, fake_bus):
    return create_app(cache=cache)


@pytest.fixture
def client(app):
    """A FastAPI TestClient for calling API endpoints."""
    with TestClient(app) as c:
        yield c


def client_headers(user_id: str) -> dict:
    return {"X-User-Id": user_id}


def admin_headers(user_id: str = "admin-1") -> dict:
    return {"X-User-Id": user_id, "X-User-Role": "admin"}
