"""Tests for the status page."""

from fastapi.testclient import TestClient

from jinoca import persona
from jinoca.status import StatusStore
from jinoca.transport.base import LifecycleEvent
from jinoca.web import create_app


def _client(store: StatusStore) -> TestClient:
    return TestClient(create_app(store))


def test_status_starting():
    store = StatusStore(qr_encoder=lambda qr: "data:image/png;base64,AAAA")
    resp = _client(store).get("/status")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": persona.STATUS_STARTING,
        "qr": None,
        "isAuthenticated": False,
        "phase": "starting",
    }


def test_status_follows_store():
    store = StatusStore(qr_encoder=lambda qr: "data:image/png;base64,AAAA")
    client = _client(store)

    store.apply(LifecycleEvent.qr_challenge("2@abc"))
    data = client.get("/status").json()
    assert data["qr"] == "data:image/png;base64,AAAA"
    assert data["isAuthenticated"] is False

    store.apply(LifecycleEvent.opened())
    data = client.get("/status").json()
    assert data["qr"] is None
    assert data["isAuthenticated"] is True
    assert data["status"] == persona.STATUS_CONNECTED


def test_index_page_polls_status():
    resp = _client(StatusStore()).get("/")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "fetch('/status')" in resp.text
    assert "setInterval(refresh, 5000)" in resp.text
