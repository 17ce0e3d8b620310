"""Unit tests for app/config/settings.py"""
import pytest

from app.config import settings
from app.config.settings import AppConfig, load_settings

SETTINGS_ENV = (
    "DEMO_MODE",
    "MONGODB_CONNECTION",
    "DATABASE",
    "COLLECTION",
    "STORE_TIMEOUT_SECONDS",
    "PROVISIONING_CLIENT_URL",
    "CLIENT_ID",
    "PROVISIONING_TIMEOUT_SECONDS",
    "SCIM_DEFAULT_PAGE_SIZE",
    "SCIM_MAX_PAGE_SIZE",
    "APP_BASE_URL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    # Point the Docker secrets directory at an empty folder
    monkeypatch.setattr(settings, "Path", lambda _: tmp_path)


def test_demo_mode_defaults(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")

    cfg = load_settings()

    assert cfg.demo_mode is True
    assert cfg.uses_memory_store is True
    assert cfg.forwarding_enabled is False
    assert cfg.database == "scim"
    assert cfg.collection == "users"
    assert cfg.store_timeout_seconds == 5
    assert cfg.default_page_size == 100
    assert cfg.max_page_size == 200
    assert cfg.provisioning_params == {}


def test_production_requires_mongodb_connection():
    with pytest.raises(RuntimeError, match="MONGODB_CONNECTION"):
        load_settings()


def test_production_settings_from_env(monkeypatch):
    monkeypatch.setenv("MONGODB_CONNECTION", "mongodb://mongo:27017")
    monkeypatch.setenv("DATABASE", "identity")
    monkeypatch.setenv("COLLECTION", "people")
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("PROVISIONING_CLIENT_URL", " https://idp.example.com/scim/Users ")
    monkeypatch.setenv("CLIENT_ID", "portal")
    monkeypatch.setenv("APP_BASE_URL", "https://scim.example.com/")

    cfg = load_settings()

    assert cfg.demo_mode is False
    assert cfg.mongodb_connection == "mongodb://mongo:27017"
    assert cfg.uses_memory_store is False
    assert cfg.database == "identity"
    assert cfg.collection == "people"
    assert cfg.store_timeout_seconds == 2.5
    assert cfg.provisioning_client_url == "https://idp.example.com/scim/Users"
    assert cfg.forwarding_enabled is True
    assert cfg.provisioning_params == {"client_id": "portal"}
    assert cfg.app_base_url == "https://scim.example.com"


def test_mongodb_connection_prefers_docker_secret(monkeypatch, tmp_path):
    (tmp_path / "mongodb_connection").write_text("mongodb://secret-host:27017\n")
    monkeypatch.setenv("MONGODB_CONNECTION", "mongodb://env-host:27017")

    cfg = load_settings()

    assert cfg.mongodb_connection == "mongodb://secret-host:27017"


def test_default_page_size_clamped_to_max(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("SCIM_DEFAULT_PAGE_SIZE", "500")
    monkeypatch.setenv("SCIM_MAX_PAGE_SIZE", "50")

    cfg = load_settings()

    assert cfg.default_page_size == 50
    assert cfg.max_page_size == 50


def test_non_numeric_timeout_rejected(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("PROVISIONING_TIMEOUT_SECONDS", "soon")

    with pytest.raises(RuntimeError, match="PROVISIONING_TIMEOUT_SECONDS"):
        load_settings()


def test_app_config_defaults():
    cfg = AppConfig()
    assert cfg.uses_memory_store is True
    assert cfg.forwarding_enabled is False
