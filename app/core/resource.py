"""Resource data model shared by the normalizer, patch engine and handler."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

# Loosely-typed attribute tree: str | number | bool | null | mapping | list
JsonValue = Union[str, int, float, bool, None, Dict[str, Any], List[Any]]
Attributes = Dict[str, JsonValue]

# Zero timestamp, returned for present-but-unparseable values
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)

RESERVED_KEYS = ("id", "externalId", "meta")

SCIM_USER_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:User"


@dataclass(frozen=True)
class ResourceType:
    """Resource type served by a handler (e.g. User at /Users)."""
    name: str
    endpoint: str
    schema: str = SCIM_USER_SCHEMA
    description: str = ""

    def location(self, resource_id: str) -> str:
        """Relative URI of a resource: endpoint without leading slash, then the id."""
        return f"{self.endpoint.lstrip('/')}/{quote(resource_id, safe='')}"


USER_RESOURCE_TYPE = ResourceType(
    name="User",
    endpoint="/Users",
    schema=SCIM_USER_SCHEMA,
    description="User Account",
)


@dataclass
class Meta:
    """Server-managed resource metadata. All-empty is the zero value."""
    resource_type: str = ""
    created: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    version: str = ""
    location: str = ""

    def is_zero(self) -> bool:
        return self == Meta()


@dataclass
class Resource:
    id: str
    attributes: Attributes = field(default_factory=dict)
    external_id: Optional[str] = None
    meta: Meta = field(default_factory=Meta)
    # Identifier the downstream provisioning target assigned on create
    downstream_id: Optional[str] = None


@dataclass
class Page:
    """Bounded window over the full resource list plus the true total."""
    total_results: int
    resources: List[Resource] = field(default_factory=list)


@dataclass
class PatchOperation:
    """One add/replace/remove instruction.

    ``path`` is a literal top-level attribute name; empty means the whole resource.
    """
    op: str
    path: str = ""
    value: JsonValue = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PatchOperation":
        return cls(
            op=str(raw.get("op", "")).lower(),
            path=raw.get("path") or "",
            value=raw.get("value"),
        )

    def to_dict(self) -> Dict[str, Any]:
        operation: Dict[str, Any] = {"op": self.op}
        if self.path:
            operation["path"] = self.path
        if self.op != "remove":
            operation["value"] = self.value
        return operation
