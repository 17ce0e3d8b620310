"""Application-level error handlers.

Routing failures and uncaught exceptions never reach the SCIM blueprint's
own ScimError handler. They are rendered here: with the SCIM Error schema
under /scim/v2, as plain JSON everywhere else.
"""
import logging

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from app.core.exceptions import ScimError

logger = logging.getLogger(__name__)

SCIM_PATH_PREFIX = "/scim/v2"


def _error_response(status: int, title: str, message: str):
    if request.path.startswith(SCIM_PATH_PREFIX):
        return jsonify(ScimError(status, message).to_dict()), status
    return jsonify({"error": title, "message": message}), status


def register_error_handlers(app):
    """Register JSON error handlers with the Flask app."""

    @app.errorhandler(404)
    def not_found(error):
        return _error_response(404, "Not Found", f"No route for {request.path}")

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error_response(405, "Method Not Allowed", f"{request.method} not allowed on {request.path}")

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal error | path={request.path} | error={error}", exc_info=True)
        return _error_response(500, "Internal Server Error", "An unexpected error occurred")

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Render uncaught exceptions; HTTP errors pass through untouched."""
        if isinstance(error, HTTPException):
            return error

        logger.error(f"Unhandled exception | path={request.path} | error={error}", exc_info=True)
        return _error_response(500, "Internal Server Error", "An unexpected error occurred")
