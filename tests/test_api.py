"""
Tests for the HTTP API.

Run with: python -m pytest tests/test_api.py
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from logic.exceptions import StoreWriteError
from logic.store import MemoryDocumentStore
from main import create_app

CATEGORIES = [
    {"id": "abrigo", "name": "Abrigo", "description": ""},
    {"id": "caps", "name": "CAPS", "description": ""},
]

LOCATIONS = [
    {
        "id": "a1",
        "title": "Abrigo Central",
        "description": "Ginásio municipal",
        "categoryId": "abrigo",
        "lat": -26.30,
        "lon": -48.84,
        "schedule": [{"from": "08:00", "to": "12:00"}, {"from": "13:00", "to": "18:00"}],
        "info": "",
    },
    {
        "id": "c1",
        "title": "CAPS Norte",
        "description": "",
        "categoryId": "caps",
        "lat": -26.25,
        "lon": -48.85,
        "schedule": [],
        "info": "",
    },
]


@pytest.fixture
def store():
    return MemoryDocumentStore(categories=CATEGORIES, locations=LOCATIONS)


@pytest.fixture
def client(store):
    with TestClient(create_app(store=store)) as client:
        yield client


def test_map_settings(client):
    response = client.get("/api/map")
    assert response.status_code == 200
    data = response.json()

    assert data["center"] == [-26.292977, -48.848306]
    assert data["zoom"] == 13
    assert data["max_bounds"] == [[-26.6, -49.2], [-25.8, -48.5]]
    assert "openstreetmap" in data["tile_url"]


def test_categories_and_filters(client):
    categories = client.get("/api/categories").json()
    assert [c["id"] for c in categories] == ["abrigo", "caps"]
    assert categories[0]["label"] == "Abrigo"

    data = client.get("/api/filters").json()
    assert data == {"filters": {"abrigo": True, "caps": True}, "filters_visible": True}


def test_locations_respect_filters(client):
    markers = client.get("/api/locations").json()
    assert [m["id"] for m in markers] == ["a1", "c1"]
    assert markers[0]["popup"]["schedule"] == "08:00 - 12:00, 13:00 - 18:00"

    response = client.post("/api/filters/caps", json={"visible": False})
    assert response.json() == {"id": "caps", "visible": False}
    assert [m["id"] for m in client.get("/api/locations").json()] == ["a1"]

    # No body toggles
    assert client.post("/api/filters/caps").json()["visible"] is True
    assert [m["id"] for m in client.get("/api/locations").json()] == ["a1", "c1"]


def test_filter_panel_toggle(client):
    assert client.post("/api/filters/panel/toggle").json() == {"filters_visible": False}
    assert client.get("/api/filters").json()["filters_visible"] is False


def test_add_location_flow(client, store):
    assert client.post("/api/draft/placement").json() == {"placing": True}

    response = client.post("/api/map/click", json={"lat": -26.3, "lon": -48.8})
    assert response.status_code == 200
    assert response.json()["placed"] is True
    assert response.json()["form_open"] is True

    client.patch("/api/draft", json={"title": "Casa X", "categoryId": "caps"})
    client.post("/api/draft/schedule")
    client.patch("/api/draft/schedule/1", json={"field": "from", "value": "09:00"})

    response = client.post("/api/draft/save")
    assert response.status_code == 200
    assert response.json() == {"success": True, "location_count": 3}

    markers = client.get("/api/locations").json()
    assert markers[-1]["popup"]["title"] == "Casa X"
    assert markers[-1]["categoryId"] == "caps"
    assert len(store.locations) == 3

    state = client.get("/api/state").json()
    assert state["form_open"] is False
    assert state["draft"]["title"] == ""


def test_click_outside_bounds_is_rejected(client):
    client.post("/api/draft/placement")

    response = client.post("/api/map/click", json={"lat": -10.0, "lon": -48.8})

    assert response.status_code == 400
    assert client.get("/api/state").json()["placing"] is True


def test_click_without_placement_is_ignored(client):
    response = client.post("/api/map/click", json={"lat": -26.3, "lon": -48.8})

    assert response.status_code == 200
    assert response.json()["placed"] is False


def test_save_without_title_is_rejected(client, store):
    client.post("/api/draft/placement")
    client.post("/api/map/click", json={"lat": -26.3, "lon": -48.8})

    response = client.post("/api/draft/save")

    assert response.status_code == 400
    assert "campos obrigatórios" in response.json()["detail"]
    assert len(store.locations) == 2


def test_save_store_failure_returns_502(client, store):
    store.update_location = AsyncMock(side_effect=StoreWriteError("denied"))

    client.post("/api/locations/a1/edit")
    client.patch("/api/draft", json={"title": "Outro"})
    response = client.post("/api/draft/save")

    assert response.status_code == 502
    assert client.get("/api/state").json()["form_open"] is True
    assert client.get("/api/locations").json()[0]["popup"]["title"] == "Abrigo Central"


def test_edit_location(client):
    response = client.post("/api/locations/c1/edit")
    assert response.status_code == 200
    assert response.json()["schedule"] == [{"from": "", "to": ""}]

    client.patch("/api/draft", json={"info": "Atendimento 24h"})
    assert client.post("/api/draft/save").status_code == 200

    markers = client.get("/api/locations").json()
    assert markers[1]["id"] == "c1"
    assert markers[1]["popup"]["info"] == "Atendimento 24h"


def test_edit_unknown_location(client):
    assert client.post("/api/locations/nope/edit").status_code == 404


def test_illegal_draft_field(client):
    response = client.patch("/api/draft", json={"id": "hack"})
    assert response.status_code == 400


def test_reserved_name_draft_field_is_rejected(client):
    response = client.patch("/api/draft", json={"self": "x"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Illegal field: self"


def test_schedule_bounds_over_http(client):
    client.post("/api/draft/placement")

    for _ in range(8):
        client.post("/api/draft/schedule")
    assert len(client.get("/api/draft").json()["schedule"]) == 7

    response = client.delete("/api/draft/schedule/9")
    assert response.status_code == 400

    response = client.patch("/api/draft/schedule/0", json={"field": "until", "value": "10:00"})
    assert response.status_code == 400


def test_cancel_draft(client):
    client.post("/api/draft/placement")
    client.post("/api/map/click", json={"lat": -26.3, "lon": -48.8})

    assert client.post("/api/draft/cancel").json() == {"success": True}

    state = client.get("/api/state").json()
    assert state["form_open"] is False
    assert state["draft"]["position"] is None


def test_delete_flow(client, store):
    assert client.post("/api/deletion/confirm").status_code == 400

    response = client.post("/api/locations/c1/delete")
    assert response.json() == {"pending_deletion": "c1"}

    response = client.post("/api/deletion/confirm")
    assert response.status_code == 200
    assert [m["id"] for m in client.get("/api/locations").json()] == ["a1"]
    assert "c1" not in store.locations


def test_delete_failure_keeps_pending(client, store):
    store.delete_location = AsyncMock(side_effect=StoreWriteError("denied"))

    client.post("/api/locations/a1/delete")
    response = client.post("/api/deletion/confirm")

    assert response.status_code == 502
    state = client.get("/api/state").json()
    assert state["pending_deletion"] == "a1"
    assert state["location_count"] == 2

    client.post("/api/deletion/cancel")
    assert client.get("/api/state").json()["pending_deletion"] is None


def test_confirm_delete_while_deleting_returns_409(client, store):
    client.post("/api/locations/a1/delete")
    client.app.state.registry.state.deleting = True

    response = client.post("/api/deletion/confirm")

    assert response.status_code == 409
    assert "a1" in store.locations
    assert client.get("/api/state").json()["pending_deletion"] == "a1"
