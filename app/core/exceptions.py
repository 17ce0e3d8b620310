"""SCIM error taxonomy raised by the resource handler.

The protocol layer maps each error to an HTTP status through
``ScimError.status`` and renders ``ScimError.to_dict()`` as the body.
"""
from __future__ import annotations
from typing import Optional

SCIM_ERROR_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:Error"


class ScimError(Exception):
    """SCIM protocol error with HTTP status and optional scimType."""

    def __init__(self, status: int, detail: str, scim_type: Optional[str] = None):
        self.status = status
        self.detail = detail
        self.scim_type = scim_type
        super().__init__(detail)

    def to_dict(self) -> dict:
        """Convert to SCIM error response format."""
        error_dict = {
            "schemas": [SCIM_ERROR_SCHEMA],
            "status": str(self.status),
            "detail": self.detail,
        }
        if self.scim_type:
            error_dict["scimType"] = self.scim_type
        return error_dict


class ResourceNotFoundError(ScimError):
    """Requested resource does not exist."""

    def __init__(self, resource_id: str):
        self.resource_id = resource_id
        super().__init__(404, f"Resource {resource_id} not found.")


class InternalError(ScimError):
    """Store connectivity or serialization failure. Not retried."""

    def __init__(self, detail: str = "An internal error occurred."):
        super().__init__(500, detail)


class InvalidPatchError(ScimError):
    """Malformed patch operation (client input error)."""

    def __init__(self, detail: str):
        super().__init__(400, detail, "invalidValue")


class ForwardError(ScimError):
    """Replication to the downstream provisioning endpoint failed.

    Attributes:
        phase: "create", "update" or "delete"
        status_code: Downstream HTTP status, if a response was received
        body: Downstream response body, kept as diagnostic text
    """

    def __init__(
        self,
        phase: str,
        detail: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.phase = phase
        self.status_code = status_code
        self.body = body
        super().__init__(502, f"Provisioning {phase} failed: {detail}")
