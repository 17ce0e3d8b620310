"""Health check endpoints."""
import logging

from flask import Blueprint, current_app

from app.core.store import StoreError

bp = Blueprint("health", __name__)

logger = logging.getLogger(__name__)


@bp.route("/health")
def health_check():
    """Basic health check endpoint."""
    return ("ok", 200, {"Content-Type": "text/plain"})


@bp.route("/ready")
def readiness_check():
    """Readiness check endpoint: the document store must answer a ping."""
    handler = current_app.config.get("SCIM_HANDLER")
    if handler is None:
        return ("not ready", 503, {"Content-Type": "text/plain"})
    try:
        handler.store.ping()
    except StoreError as exc:
        logger.warning(f"Readiness check failed | error={exc}")
        return ("not ready", 503, {"Content-Type": "text/plain"})
    return ("ready", 200, {"Content-Type": "text/plain"})
