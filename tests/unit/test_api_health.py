"""Unit tests for the /health and /ready endpoints."""
from app.core.store import StoreError


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.data == b"ok"


def test_ready_when_store_answers(client):
    resp = client.get("/ready")
    assert resp.status_code == 200
    assert resp.data == b"ready"


def test_not_ready_when_store_unreachable(client, store, monkeypatch):
    def _fail():
        raise StoreError("ping", "no primary available")

    monkeypatch.setattr(store, "ping", _fail)

    resp = client.get("/ready")

    assert resp.status_code == 503
