# tests/test_consultations.py
from datetime import datetime, timedelta

import pytest

from app.models.client import Client, utcnow
from app.models.consultation import Consultation
from app.models.notification import Notification
from conftest import admin_headers, client_headers


@pytest.fixture
def clients(db_session):
    db_session.add_all([
        Client(id="client-1", full_name="Ada Lovelace", email="ada@example.com"),
        Client(id="client-2", full_name="Alan Turing", email="alan@example.com"),
    ])
    db_session.commit()
    return db_session


def test_admin_books_consultation_and_client_is_notified(client, clients, fake_bus):
    res = client.post(
        "/api/consultations",
        json={"client_id": "client-1", "scheduled_at": "2030-01-15T09:30:00+02:00", "meeting_link": "https://meet.example.com/abc"},
        headers=admin_headers(),
    )
    assert res.status_code == 201, res.text
    created = res.json()
    assert created["status"] == "confirmed"
    # Offsets are normalised to UTC
    assert created["scheduled_at"] == "2030-01-15T07:30:00.000Z"

    stored = clients.get(Consultation, created["id"])
    assert stored.scheduled_at == datetime(2030, 1, 15, 7, 30)

    notifications = clients.query(Notification).filter_by(user_id="client-1").all()
    assert [n.type for n in notifications] == ["consultation_scheduled"]

    assert len(fake_bus.published) == 1
    user_id, payload = fake_bus.published[0]
    assert user_id == "client-1"
    assert payload["metadata"] == {"consultation_id": created["id"]}


def test_booked_consultation_shows_on_dashboard(client, clients):
    when = (utcnow() + timedelta(days=3)).isoformat()
    client.post("/api/consultations", json={"client_id": "client-1", "scheduled_at": when}, headers=admin_headers())

    body = client.get("/api/dashboard", headers=client_headers("client-1")).json()
    assert body["stats"]["upcoming_consultations"] == 1
    assert len(body["upcoming_consultations"]) == 1


def test_booking_requires_admin(client, clients):
    res = client.post(
        "/api/consultations",
        json={"client_id": "client-1", "scheduled_at": "2030-01-15T09:30:00Z"},
        headers=client_headers("client-1"),
    )
    assert res.status_code == 403


def test_booking_for_unknown_client_is_404(client, clients):
    res = client.post(
        "/api/consultations",
        json={"client_id": "ghost", "scheduled_at": "2030-01-15T09:30:00Z"},
        headers=admin_headers(),
    )
    assert res.status_code == 404
    assert res.json() == {"error": "Client not found"}


def test_status_change_notifies_client(client, clients, fake_bus):
    consultation = Consultation(client_id="client-1", scheduled_at=utcnow() + timedelta(days=1), status="confirmed")
    clients.add(consultation)
    clients.commit()

    res = client.patch(f"/api/consultations/{consultation.id}", json={"status": "cancelled"}, headers=admin_headers())
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"

    assert len(fake_bus.published) == 1
    user_id, payload = fake_bus.published[0]
    assert user_id == "client-1"
    assert payload["type"] == "consultation_updated"
    assert payload["metadata"]["previous_status"] == "confirmed"


def test_meeting_link_only_update_does_not_notify(client, clients, fake_bus):
    consultation = Consultation(client_id="client-1", scheduled_at=utcnow() + timedelta(days=1))
    clients.add(consultation)
    clients.commit()

    res = client.patch(
        f"/api/consultations/{consultation.id}",
        json={"meeting_link": "https://meet.example.com/new"},
        headers=admin_headers(),
    )
    assert res.status_code == 200
    assert res.json()["meeting_link"] == "https://meet.example.com/new"
    assert fake_bus.published == []


def test_update_unknown_consultation_is_404(client, clients):
    res = client.patch("/api/consultations/missing", json={"status": "completed"}, headers=admin_headers())
    assert res.status_code == 404
    assert res.json() == {"error": "Consultation not found"}


def test_clients_only_see_their_own_consultations(client, clients):
    soon = utcnow() + timedelta(days=1)
    clients.add_all([
        Consultation(client_id="client-1", scheduled_at=soon),
        Consultation(client_id="client-2", scheduled_at=soon),
    ])
    clients.commit()

    own = client.get("/api/consultations?client_id=client-2", headers=client_headers("client-1")).json()
    assert [c["client_id"] for c in own] == ["client-1"]

    everything = client.get("/api/consultations", headers=admin_headers()).json()
    assert sorted(c["client_id"] for c in everything) == ["client-1", "client-2"]
