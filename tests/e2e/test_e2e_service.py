from __future__ import annotations

from fastapi.testclient import TestClient

from eventstore.api.app import create_app
from eventstore.db.store import EventStore


def test_e2e_event_lifecycle() -> None:
    client = TestClient(create_app(store=EventStore()))

    assert client.get("/").json() == {"message": "Hello World"}

    created = client.post("/events", json={"name": "Sample Event", "date": "2024-10-09"})
    assert created.status_code == 201
    event_id = created.json()["id"]

    listing = client.get("/events")
    assert [event["id"] for event in listing.json()] == [event_id]

    assert client.delete(f"/events/{event_id}").status_code == 204
    assert client.delete(f"/events/{event_id}").status_code == 404
    assert client.get("/events").json() == []

    assert client.put("/events").json() == {"message": "Not Found"}
