"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with the SCIM blueprint, the document store, and the
optional downstream provisioning forwarder.

Gunicorn loads the factory directly (see gunicorn.conf.py):
    gunicorn "app.flask_app:create_app()"
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from app.config import AppConfig, load_settings
from app.core.provisioning_client import ProvisioningClient
from app.core.provisioning_service import HandlerConfig, UserResourceHandler
from app.core.resource import USER_RESOURCE_TYPE
from app.core.seed import seed_demo_users
from app.core.store import DocumentStore, InMemoryDocumentStore, MongoDocumentStore

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[AppConfig] = None, store: Optional[DocumentStore] = None) -> Flask:
    """Create and configure Flask application.
    
    Args:
        cfg: Application settings (loaded from the environment when omitted)
        store: Document store to use instead of the one described by ``cfg``
    """
    cfg = cfg or load_settings()
    
    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.json.sort_keys = False
    
    from app.api.scim import JSON_MAX_SIZE_BYTES
    app.config["MAX_CONTENT_LENGTH"] = JSON_MAX_SIZE_BYTES
    
    # Trust X-Forwarded-* headers from proxy (nginx)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore
    
    # One handler (and one store client) per process, shared by all requests
    handler = UserResourceHandler(HandlerConfig(
        store=store if store is not None else _build_store(cfg),
        resource_type=USER_RESOURCE_TYPE,
        provisioner=_build_provisioner(cfg),
    ))
    app.config["SCIM_HANDLER"] = handler
    
    # Register blueprints
    from app.api import health, errors
    from app.api import scim
    
    app.register_blueprint(health.bp)
    app.register_blueprint(scim.bp, url_prefix="/scim/v2")
    
    # Register error handlers
    errors.register_error_handlers(app)
    
    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    logger.info(f"Mode={mode_label} | SCIM 2.0 API registered at /scim/v2")
    if cfg.demo_mode:
        logger.warning("Demo mode active - in-memory data is lost on restart")
    
    return app


def _build_store(cfg: AppConfig) -> DocumentStore:
    """Connect the configured document store (seeding demo users in demo mode)."""
    if cfg.uses_memory_store:
        store: DocumentStore = InMemoryDocumentStore()
    else:
        store = MongoDocumentStore.connect(
            cfg.mongodb_connection,
            cfg.database,
            cfg.collection,
            timeout_seconds=cfg.store_timeout_seconds,
        )
    
    if cfg.demo_mode:
        inserted = seed_demo_users(store)
        logger.info(f"[demo-mode] Seeded {inserted} demo users")
    return store


def _build_provisioner(cfg: AppConfig) -> Optional[ProvisioningClient]:
    if not cfg.forwarding_enabled:
        return None
    return ProvisioningClient(
        cfg.provisioning_client_url,
        params=cfg.provisioning_params,
        timeout=cfg.provisioning_timeout_seconds,
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_app().run(host="0.0.0.0", port=8080, debug=True)
