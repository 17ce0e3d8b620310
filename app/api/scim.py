"""SCIM 2.0 API endpoints (RFC 7644) for user provisioning.

This module is the protocol layer: it parses wire requests, delegates all
resource logic to the UserResourceHandler stored in ``app.config["SCIM_HANDLER"]``,
and maps ScimError kinds to HTTP responses.

Architecture:
    SCIM API (/scim/v2/*) -> app/core/provisioning_service.py -> DocumentStore / ProvisioningClient
"""

from __future__ import annotations
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from werkzeug.exceptions import BadRequest
from app.core.exceptions import ScimError
from app.core.patch import PATCH_OP_SCHEMA
from app.core.provisioning_service import UserResourceHandler
from app.core.resource import PatchOperation, Resource
from app.core.scim_transformer import ScimTransformer

# SCIM 2.0 Blueprint
bp = Blueprint('scim', __name__, url_prefix='/scim/v2')

# Configuration
JSON_MAX_SIZE_BYTES = 65536  # 64 KB
SCIM_LIST_RESPONSE_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:ListResponse"
PAYLOAD_METHODS = ("POST", "PUT", "PATCH")
ACCEPTED_CONTENT_TYPES = ("application/scim+json", "application/json")

logger = logging.getLogger(__name__)


def _handler() -> UserResourceHandler:
    return current_app.config["SCIM_HANDLER"]


def _config():
    return current_app.config["APP_CONFIG"]


# ─────────────────────────────────────────────────────────────────────────────
# Error Handler
# ─────────────────────────────────────────────────────────────────────────────

def scim_error(status: int, detail: str, scim_type: str = None) -> tuple[Response, int]:
    """Create SCIM error response tuple for route handlers.
    
    Args:
        status: HTTP status code
        detail: Human-readable error description
        scim_type: Optional SCIM error type (invalidSyntax, invalidValue, etc.)
    
    Returns:
        Tuple of (JSON response, status code)
    """
    error = ScimError(status, detail, scim_type)
    return jsonify(error.to_dict()), status


@bp.errorhandler(ScimError)
def handle_scim_error(error: ScimError):
    """Blueprint error handler for ScimError exceptions."""
    if error.status >= 500:
        logger.warning(f"SCIM {error.status} | path={request.path} | detail={error.detail}")
    return jsonify(error.to_dict()), error.status


@bp.errorhandler(413)
def handle_request_too_large(error):
    """Handle payload too large errors."""
    return scim_error(413, "Request payload exceeds maximum allowed size (64 KB)", "invalidValue")


# ─────────────────────────────────────────────────────────────────────────────
# Request Validation Middleware
# ─────────────────────────────────────────────────────────────────────────────

@bp.before_request
def validate_request():
    """Reject oversized payloads and non-JSON bodies before routing."""
    if request.content_length and request.content_length > JSON_MAX_SIZE_BYTES:
        return scim_error(413, "Request payload too large", "invalidValue")
    
    if request.method in PAYLOAD_METHODS:
        content_type = request.content_type or ""
        if not content_type.startswith(ACCEPTED_CONTENT_TYPES):
            return scim_error(
                415,
                "Content-Type must be application/scim+json or application/json",
                "invalidSyntax"
            )
    return None


@bp.after_request
def add_correlation_id(response):
    """Echo the correlation ID for tracing."""
    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        response.headers["X-Correlation-Id"] = correlation_id
    return response


def _json_object() -> dict:
    """Parse the request body, requiring a JSON object."""
    try:
        payload = request.get_json(force=True)
    except BadRequest:
        raise ScimError(400, "Request body is not valid JSON", "invalidSyntax")
    if not isinstance(payload, dict):
        raise ScimError(400, "Request body must be a JSON object", "invalidSyntax")
    return payload


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ScimError(400, f"{name} must be an integer", "invalidValue")


def _location_url(resource: Resource) -> str:
    base = _config().app_base_url or request.host_url.rstrip('/')
    return f"{base}{bp.url_prefix}/{resource.meta.location}"


def _render(resource: Resource) -> dict:
    return ScimTransformer.resource_to_scim(resource, [_handler().resource_type.schema])


# ─────────────────────────────────────────────────────────────────────────────
# SCIM Discovery Endpoints
# ─────────────────────────────────────────────────────────────────────────────

@bp.route('/ServiceProviderConfig', methods=['GET'])
def service_provider_config():
    """Return SCIM ServiceProviderConfig (RFC 7643 Section 5)."""
    config = {
        "schemas": ["urn:ietf:params:scim:schemas:core:2.0:ServiceProviderConfig"],
        "patch": {"supported": True},
        "bulk": {"supported": False, "maxOperations": 0, "maxPayloadSize": 0},
        "filter": {"supported": False, "maxResults": _config().max_page_size},
        "changePassword": {"supported": False},
        "sort": {"supported": False},
        "etag": {"supported": False},
        "authenticationSchemes": [],
    }
    return jsonify(config), 200


@bp.route('/ResourceTypes', methods=['GET'])
def resource_types():
    """Return supported SCIM resource types."""
    resource_type = _handler().resource_type
    resources = {
        "schemas": [SCIM_LIST_RESPONSE_SCHEMA],
        "totalResults": 1,
        "Resources": [
            {
                "schemas": ["urn:ietf:params:scim:schemas:core:2.0:ResourceType"],
                "id": resource_type.name,
                "name": resource_type.name,
                "endpoint": f"{bp.url_prefix}{resource_type.endpoint}",
                "description": resource_type.description,
                "schema": resource_type.schema,
                "meta": {
                    "location": f"{request.host_url.rstrip('/')}{bp.url_prefix}/ResourceTypes/{resource_type.name}",
                    "resourceType": "ResourceType"
                }
            }
        ]
    }
    return jsonify(resources), 200


# ─────────────────────────────────────────────────────────────────────────────
# SCIM User CRUD Operations
# ─────────────────────────────────────────────────────────────────────────────

@bp.route('/Users', methods=['POST'])
def create_user():
    """Create a new user.
    
    RFC 7644 Section 3.3: Creating Resources
    
    Returns:
        201 Created with Location header and User resource
    """
    attributes = ScimTransformer.scim_to_attributes(_json_object())
    resource = _handler().create(attributes)
    
    response = jsonify(_render(resource))
    response.status_code = 201
    response.headers["Location"] = _location_url(resource)
    return response


@bp.route('/Users/<user_id>', methods=['GET'])
def get_user(user_id: str):
    """Retrieve a specific user by ID (RFC 7644 Section 3.4.1)."""
    resource = _handler().get(user_id)
    return jsonify(_render(resource)), 200


@bp.route('/Users', methods=['GET'])
def list_users():
    """List users with pagination.
    
    RFC 7644 Section 3.4.2: Listing Resources
    
    Query parameters:
        - startIndex: 1-based starting index (default: 1)
        - count: Max results per page (default: SCIM_DEFAULT_PAGE_SIZE)
    
    Returns:
        200 OK with ListResponse
    """
    if request.args.get("filter"):
        raise ScimError(400, "Filtering is not supported", "invalidFilter")
    
    cfg = _config()
    start_index = max(1, _int_arg("startIndex", 1))
    count = min(cfg.max_page_size, max(0, _int_arg("count", cfg.default_page_size)))
    
    page = _handler().get_all(start_index, count)
    return jsonify({
        "schemas": [SCIM_LIST_RESPONSE_SCHEMA],
        "totalResults": page.total_results,
        "startIndex": start_index,
        "itemsPerPage": len(page.resources),
        "Resources": [_render(resource) for resource in page.resources],
    }), 200


@bp.route('/Users/<user_id>', methods=['PUT'])
def replace_user(user_id: str):
    """Replace every attribute of a user (RFC 7644 Section 3.5.1)."""
    attributes = ScimTransformer.scim_to_attributes(_json_object())
    resource = _handler().replace(user_id, attributes)
    return jsonify(_render(resource)), 200


@bp.route('/Users/<user_id>', methods=['PATCH'])
def patch_user(user_id: str):
    """Partially update a user (RFC 7644 Section 3.5.2).
    
    Operations are applied in request order; paths are literal top-level
    attribute names and an omitted path targets the whole resource.
    """
    payload = _json_object()
    
    schemas = payload.get("schemas")
    if not isinstance(schemas, list) or PATCH_OP_SCHEMA not in schemas:
        raise ScimError(400, f"schemas must include {PATCH_OP_SCHEMA}", "invalidSyntax")
    
    raw_operations = payload.get("Operations")
    if not isinstance(raw_operations, list) or not raw_operations:
        raise ScimError(400, "Operations must be a non-empty list", "invalidSyntax")
    
    operations = []
    for raw in raw_operations:
        if not isinstance(raw, dict) or not isinstance(raw.get("op"), str):
            raise ScimError(400, "Each operation must be an object with an 'op' string", "invalidSyntax")
        if raw.get("path") is not None and not isinstance(raw["path"], str):
            raise ScimError(400, "Operation path must be a string", "invalidPath")
        operations.append(PatchOperation.from_dict(raw))
    
    resource = _handler().patch(user_id, operations)
    return jsonify(_render(resource)), 200


@bp.route('/Users/<user_id>', methods=['DELETE'])
def delete_user(user_id: str):
    """Permanently delete a user (RFC 7644 Section 3.6)."""
    _handler().delete(user_id)
    return '', 204
