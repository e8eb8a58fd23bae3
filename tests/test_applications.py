# tests/test_applications.py
import pytest

from app.models.application import Application
from app.models.client import Client
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


def _payload(**overrides):
    payload = {
        "client_id": "client-1",
        "company": "Acme",
        "job_title": "Backend Engineer",
        "job_url": "https://jobs.example.com/123",
    }
    payload.update(overrides)
    return payload


def test_admin_creates_application_and_client_is_notified(client, clients, fake_bus):
    res = client.post("/api/applications", json=_payload(), headers=admin_headers())
    assert res.status_code == 201, res.text
    created = res.json()
    assert created["status"] == "applied"
    assert created["client_id"] == "client-1"
    assert created["created_at"].endswith("Z")

    notifications = clients.query(Notification).filter_by(user_id="client-1").all()
    assert [n.type for n in notifications] == ["application_created"]

    assert len(fake_bus.published) == 1
    user_id, payload = fake_bus.published[0]
    assert user_id == "client-1"
    assert payload["metadata"] == {"application_id": created["id"]}


def test_create_requires_admin(client, clients):
    res = client.post("/api/applications", json=_payload(), headers=client_headers("client-1"))
    assert res.status_code == 403
    assert res.json() == {"error": "Admin access required"}


def test_create_validates_against_json_schema(client, clients):
    broken = _payload()
    del broken["company"]
    broken["status"] = "hired"

    res = client.post("/api/applications", json=broken, headers=admin_headers())
    assert res.status_code == 400
    errors = res.json()["validationErrors"]
    assert len(errors) == 2


def test_create_rejects_invalid_json(client, clients):
    res = client.post(
        "/api/applications",
        content=b"{not json",
        headers={**admin_headers(), "Content-Type": "application/json"},
    )
    assert res.status_code == 400


def test_create_for_unknown_client_is_404(client, clients):
    res = client.post("/api/applications", json=_payload(client_id="ghost"), headers=admin_headers())
    assert res.status_code == 404
    assert res.json() == {"error": "Client not found"}


def test_clients_only_see_their_own_applications(client, clients):
    clients.add_all([
        Application(client_id="client-1", company="Acme", job_title="Engineer"),
        Application(client_id="client-2", company="Globex", job_title="Analyst"),
    ])
    clients.commit()

    own = client.get("/api/applications", headers=client_headers("client-1"))
    assert [a["company"] for a in own.json()] == ["Acme"]

    # client_id filter is ignored for non-admins
    sneaky = client.get("/api/applications?client_id=client-2", headers=client_headers("client-1"))
    assert [a["company"] for a in sneaky.json()] == ["Acme"]

    everything = client.get("/api/applications", headers=admin_headers())
    assert sorted(a["company"] for a in everything.json()) == ["Acme", "Globex"]

    filtered = client.get("/api/applications?client_id=client-2", headers=admin_headers())
    assert [a["company"] for a in filtered.json()] == ["Globex"]


def test_status_filter(client, clients):
    clients.add_all([
        Application(client_id="client-1", company="Acme", job_title="Engineer", status="offer"),
        Application(client_id="client-1", company="Globex", job_title="Analyst", status="rejected"),
    ])
    clients.commit()

    res = client.get("/api/applications?status=offer", headers=client_headers("client-1"))
    assert [a["company"] for a in res.json()] == ["Acme"]


def test_status_update_notifies_client(client, clients, fake_bus):
    application = Application(client_id="client-1", company="Acme", job_title="Engineer")
    clients.add(application)
    clients.commit()
    app_id = application.id

    res = client.patch(f"/api/applications/{app_id}", json={"status": "interview"}, headers=admin_headers())
    assert res.status_code == 200
    assert res.json()["status"] == "interview"

    assert len(fake_bus.published) == 1
    user_id, payload = fake_bus.published[0]
    assert user_id == "client-1"
    assert payload["type"] == "application_status_updated"
    assert payload["metadata"]["previous_status"] == "applied"


def test_notes_only_update_does_not_notify(client, clients, fake_bus):
    application = Application(client_id="client-1", company="Acme", job_title="Engineer")
    clients.add(application)
    clients.commit()

    res = client.patch(f"/api/applications/{application.id}", json={"notes": "Referral sent"}, headers=admin_headers())
    assert res.status_code == 200
    assert res.json()["notes"] == "Referral sent"
    assert fake_bus.published == []


def test_update_unknown_application_is_404(client, clients):
    res = client.patch("/api/applications/missing", json={"status": "offer"}, headers=admin_headers())
    assert res.status_code == 404
