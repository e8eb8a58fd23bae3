# tests/test_notifications.py
import asyncio
import json

import pytest

from app.models.notification import Notification
from app.routers.stream import iter_ndjson
from conftest import FakeBus, client_headers


@pytest.fixture
def notifications(db_session):
    db_session.add_all([
        Notification(id="n-1", user_id="client-1", type="welcome", title="Welcome", message="Hi", metadata_={"step": 1}),
        Notification(id="n-2", user_id="client-1", type="old", title="Old", message="Seen", is_read=True),
        Notification(id="n-3", user_id="client-2", type="welcome", title="Welcome", message="Hi"),
    ])
    db_session.commit()
    return db_session


def test_list_own_notifications(client, notifications):
    res = client.get("/api/notifications", headers=client_headers("client-1"))
    assert res.status_code == 200
    assert sorted(n["id"] for n in res.json()) == ["n-1", "n-2"]

    unread = client.get("/api/notifications?unread_only=true", headers=client_headers("client-1")).json()
    assert [n["id"] for n in unread] == ["n-1"]
    assert unread[0]["metadata"] == {"step": 1}


def test_mark_read_publishes_to_user(client, notifications, fake_bus):
    res = client.patch("/api/notifications/n-1/read", headers=client_headers("client-1"))
    assert res.status_code == 200
    body = res.json()
    assert body["is_read"] is True
    assert body["read_at"].endswith("Z")

    assert fake_bus.published == [("client-1", {"type": "notification_read", "notificationId": "n-1"})]


def test_cannot_mark_someone_elses_notification(client, notifications):
    res = client.patch("/api/notifications/n-3/read", headers=client_headers("client-1"))
    assert res.status_code == 404
    assert res.json() == {"error": "Notification not found"}


def test_stream_returns_503_when_bus_is_down(client, fake_bus):
    fake_bus.fail_subscribe = True
    res = client.get("/api/notifications/stream", headers=client_headers("client-1"))
    assert res.status_code == 503


def test_stream_requires_identity(client):
    assert client.get("/api/notifications/stream").status_code == 401


def test_ndjson_lines_follow_user_channel():
    bus = FakeBus()

    async def never_disconnected():
        return False

    async def scenario():
        mine = await bus.open_subscriber("client-1")
        theirs = await bus.open_subscriber("client-2")
        lines = iter_ndjson(bus, mine, never_disconnected)

        await bus.publish("client-2", {"type": "not-for-me"})
        await bus.publish("client-1", {"type": "application_created", "id": "n-9"})

        line = await asyncio.wait_for(lines.__anext__(), timeout=1.0)
        await lines.aclose()
        return line, mine, theirs

    line, mine, theirs = asyncio.run(scenario())
    assert line.endswith(b"\n")
    assert json.loads(line) == {"type": "application_created", "id": "n-9"}
    # Closing the stream releases only its own subscriber
    assert mine.closed is True
    assert bus.subscribers["client-1"] == []
    assert bus.subscribers["client-2"] == [theirs]


def test_ndjson_fans_out_to_every_connection_of_a_user():
    bus = FakeBus()

    async def never_disconnected():
        return False

    async def scenario():
        first = iter_ndjson(bus, await bus.open_subscriber("client-1"), never_disconnected)
        second = iter_ndjson(bus, await bus.open_subscriber("client-1"), never_disconnected)
        await bus.publish("client-1", {"type": "broadcast"})
        got = [
            await asyncio.wait_for(first.__anext__(), timeout=1.0),
            await asyncio.wait_for(second.__anext__(), timeout=1.0),
        ]
        await first.aclose()
        await second.aclose()
        return got

    first_line, second_line = asyncio.run(scenario())
    assert json.loads(first_line) == json.loads(second_line) == {"type": "broadcast"}


def test_ndjson_stops_when_client_disconnects():
    bus = FakeBus()

    async def disconnected():
        return True

    async def scenario():
        pubsub = await bus.open_subscriber("client-1")
        lines = [line async for line in iter_ndjson(bus, pubsub, disconnected)]
        return lines, pubsub

    lines, pubsub = asyncio.run(scenario())
    assert lines == []
    assert pubsub.closed is True
