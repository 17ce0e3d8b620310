"""Pytest shared fixtures."""
import json
import os
import pathlib
import sys
from datetime import datetime, timedelta, timezone

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")
os.environ.pop("MONGODB_CONNECTION", None)
os.environ.pop("PROVISIONING_CLIENT_URL", None)

import pytest
import requests

from app.config import AppConfig
from app.core.provisioning_service import HandlerConfig, UserResourceHandler
from app.core.store import InMemoryDocumentStore
from app.flask_app import create_app


FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; each call advances one second."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload=None, text: str = None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching a real provisioning endpoint.

    Tests that exercise forwarding replace these stubs with their own.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _unexpected(method):
        def _stub(url, *args, **kwargs):
            raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")
        return _stub

    monkeypatch.setattr(requests, "post", _unexpected("POST"))
    monkeypatch.setattr(requests, "patch", _unexpected("PATCH"))
    monkeypatch.setattr(requests, "delete", _unexpected("DELETE"))


# ─────────────────────────────────────────────────────────────────────────────
# Engine fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def id_factory():
    counter = iter(range(1, 10_000))
    return lambda: f"00000000-0000-0000-0000-{next(counter):012d}"


@pytest.fixture
def handler(store, clock, id_factory):
    return UserResourceHandler(HandlerConfig(store=store, clock=clock, id_factory=id_factory))


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def app_config():
    return AppConfig(demo_mode=False, default_page_size=100, max_page_size=200)


@pytest.fixture
def flask_app(app_config, store):
    flask_app = create_app(app_config, store=store)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(flask_app):
    with flask_app.test_client() as client:
        yield client


@pytest.fixture
def stub_response():
    """Factory for requests.Response stand-ins."""
    return StubResponse
