from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from eventstore.api.app import create_app
from eventstore.api.deps import get_store
from eventstore.db.store import EventStore

SAMPLE_EVENT = {"name": "Sample Event", "date": "2024-10-09"}


def _setup_app() -> tuple[TestClient, EventStore]:
    store = EventStore()
    return TestClient(create_app(store=store)), store


def test_create_event_returns_stored_record() -> None:
    client, store = _setup_app()

    response = client.post("/events", json=SAMPLE_EVENT)
    assert response.status_code == 201
    assert response.headers["content-type"] == "application/json"
    payload = response.json()
    assert isinstance(payload["id"], str)
    assert payload["id"]
    assert payload == {"id": payload["id"], **SAMPLE_EVENT}
    assert store.list_events() == [payload]


def test_create_event_discards_client_id() -> None:
    client, _store = _setup_app()

    response = client.post("/events", json={"id": "mine", "name": "x"})
    assert response.status_code == 201
    assert response.json()["id"] != "mine"
    assert list(response.json()) == ["id", "name"]


def test_list_events_in_creation_order() -> None:
    client, _store = _setup_app()
    assert client.get("/events").json() == []

    created = [client.post("/events", json={"n": index}).json() for index in range(5)]

    response = client.get("/events")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == created
    assert len({event["id"] for event in created}) == 5


def test_delete_event_then_repeat_is_not_found() -> None:
    client, _store = _setup_app()
    keep = client.post("/events", json={"name": "keep"}).json()
    drop = client.post("/events", json=SAMPLE_EVENT).json()

    first = client.delete(f"/events/{drop['id']}")
    assert first.status_code == 204
    assert first.content == b""
    assert first.headers["content-type"] == "application/json"
    assert client.get("/events").json() == [keep]

    second = client.delete(f"/events/{drop['id']}")
    assert second.status_code == 404
    assert second.json() == {"message": "Event not found"}


def test_delete_unknown_event() -> None:
    client, store = _setup_app()
    client.post("/events", json=SAMPLE_EVENT)

    response = client.delete("/events/does-not-exist")
    assert response.status_code == 404
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"message": "Event not found"}
    assert store.count() == 1


def test_delete_uses_first_segment_after_events() -> None:
    client, store = _setup_app()
    event = client.post("/events", json=SAMPLE_EVENT).json()

    response = client.delete(f"/events/{event['id']}/extra")
    assert response.status_code == 204
    assert store.count() == 0


def test_delete_with_empty_id_is_event_not_found() -> None:
    client, _store = _setup_app()

    response = client.delete("/events/")
    assert response.status_code == 404
    assert response.json() == {"message": "Event not found"}


@pytest.mark.parametrize(
    "body",
    ["{not json", "", '{"value": NaN}', '{"x": 1e400}', '{"x": -1e400}'],
)
def test_create_event_rejects_malformed_json(body: str) -> None:
    client, store = _setup_app()

    response = client.post(
        "/events", content=body, headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid JSON body"}
    assert store.count() == 0

    listing = client.get("/events")
    assert listing.status_code == 200
    assert listing.json() == []


@pytest.mark.parametrize("body", ["[1, 2]", '"text"', "42", "null"])
def test_create_event_rejects_non_object_json(body: str) -> None:
    client, store = _setup_app()

    response = client.post("/events", content=body)
    assert response.status_code == 400
    assert response.json() == {"message": "Event payload must be a JSON object"}
    assert store.count() == 0


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("PUT", "/events"),
        ("PATCH", "/events"),
        ("DELETE", "/events"),
        ("POST", "/"),
        ("GET", "/events/"),
        ("GET", "/events/abc"),
        ("GET", "/unknown"),
        ("POST", "/events/abc"),
    ],
)
def test_undefined_routes_are_not_found(method: str, path: str) -> None:
    client, _store = _setup_app()

    response = client.request(method, path)
    assert response.status_code == 404
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"message": "Not Found"}


def test_store_dependency_can_be_overridden() -> None:
    app = create_app(store=EventStore())
    override = EventStore()
    override.append_event({"name": "from override"})
    app.dependency_overrides[get_store] = lambda: override

    response = TestClient(app).get("/events")
    assert [event["name"] for event in response.json()] == ["from override"]


def test_apps_do_not_share_stores() -> None:
    first, _ = _setup_app()
    second, _ = _setup_app()

    first.post("/events", json=SAMPLE_EVENT)
    assert second.get("/events").json() == []


def test_create_event_rejects_deeply_nested_json() -> None:
    client, store = _setup_app()
    body = '{"a": ' + "[" * 100_000 + "]" * 100_000 + "}"

    response = client.post("/events", content=body)
    assert response.status_code == 400
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"message": "Invalid JSON body"}
    assert store.count() == 0


def test_create_event_reports_id_exhaustion_as_json() -> None:
    store = EventStore(id_factory=lambda: "same", max_id_attempts=3)
    client = TestClient(create_app(store=store))
    assert client.post("/events", json=SAMPLE_EVENT).status_code == 201

    response = client.post("/events", json=SAMPLE_EVENT)
    assert response.status_code == 500
    assert response.json() == {"message": "No unused event id after 3 attempts"}
    assert store.count() == 1
