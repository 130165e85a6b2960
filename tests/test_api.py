"""Tests for the FastAPI session shell."""

import pytest
from fastapi.testclient import TestClient

from api.main import app
from geocontacts.application import ContactsPage, SelectionSynchronizer
from geocontacts.infrastructure import InMemoryMapSurface

CLUSTER_KEY = "10.0,20.0"


@pytest.fixture
def client(monkeypatch, store, gateway, lookups):
    monkeypatch.setenv("GEOCONTACTS_BACKEND", "memory")
    with TestClient(app) as c:
        surface = InMemoryMapSurface()
        app.state.surface = surface
        app.state.page = ContactsPage(store, gateway, SelectionSynchronizer(surface), lookups)
        yield c


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_reload_returns_list_markers_and_camera(client):
    r = client.post("/contacts/reload")
    assert r.status_code == 200
    body = r.json()
    assert [c["name"] for c in body["contacts"]] == ["Alice", "Bruno", "Carla", "Davi"]
    assert body["selected_id"] is None
    assert len(body["markers"]) == 2
    cluster = body["markers"][0]
    assert cluster["key"] == CLUSTER_KEY
    assert cluster["count"] == 2
    assert cluster["contact_ids"] == ["a", "b"]
    assert cluster["icon"].startswith("data:image/svg+xml")
    assert body["camera"]["padding"] == 50
    assert body["menu"] == {"open": False, "anchor": None, "entries": []}


def test_cluster_click_then_pick(client):
    client.post("/contacts/reload")
    r = client.post(f"/markers/{CLUSTER_KEY}/click", json={"x": 5, "y": 6})
    menu = r.json()["menu"]
    assert menu["open"]
    assert menu["anchor"] == [5.0, 6.0]
    assert [e["name"] for e in menu["entries"]] == ["Alice", "Bruno"]

    r = client.post("/menu/pick", json={"contact_id": "b"})
    body = r.json()
    assert body["selected_id"] == "b"
    assert body["menu"]["open"] is False
    assert body["camera"]["zoom"] == 15
    assert [c["highlighted"] for c in body["contacts"]] == [False, True, False, False]


def test_unknown_marker_is_404(client):
    client.post("/contacts/reload")
    r = client.post("/markers/1.0,1.0/click", json={})
    assert r.status_code == 404


def test_select_and_clear(client):
    client.post("/contacts/reload")
    r = client.post("/selection", json={"contact_id": "c"})
    assert r.json()["selected_id"] == "c"
    r = client.post("/selection/clear")
    assert r.json()["selected_id"] is None


def test_delete_selected_contact(client, store):
    client.post("/contacts/reload")
    client.post("/selection", json={"contact_id": "a"})
    r = client.delete("/contacts/a")
    assert r.status_code == 200
    body = r.json()
    assert body["selected_id"] is None
    assert "a" not in [c["id"] for c in body["contacts"]]
    assert store.deleted == ["a"]


def test_delete_failure_is_502(client):
    client.post("/contacts/reload")
    r = client.delete("/contacts/missing")
    assert r.status_code == 502


def test_form_validation_round_trip(client):
    client.post("/contacts/reload")
    r = client.post("/form", json={})
    assert r.json()["form"]["contact_id"] is None

    r = client.patch("/form/fields", json={"field": "national_id", "value": "11111111111"})
    assert r.json()["form"]["values"]["national_id"] == "111.111.111-11"
    r = client.post("/form/blur/national_id")
    assert r.json()["form"]["errors"]["national_id"] == "Invalid checksum"

    r = client.post("/form/submit")
    form = r.json()["form"]
    assert form is not None
    assert form["can_submit"] is False
    assert "name" in form["errors"]

    r = client.delete("/form")
    assert r.json()["form"] is None


def test_unknown_form_field_is_400(client):
    client.post("/form", json={})
    r = client.patch("/form/fields", json={"field": "email", "value": "x"})
    assert r.status_code == 400


def test_form_commands_without_form_are_404(client):
    r = client.post("/form/submit")
    assert r.status_code == 404


def test_negative_suggestion_index_is_404(client):
    client.post("/form", json={})
    r = client.post("/form/suggestions/-1")
    assert r.status_code == 404
