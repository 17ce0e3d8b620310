"""Persisted document ↔ SCIM resource transformations.

A persisted document is a flat mapping: the attribute tree plus ``id``,
``externalId`` and a ``meta`` sub-document whose keys are stored lower-cased
(``resourcetype``, ``created``, ``lastmodified``, ``version``, ``location``).
Resources replicated downstream also carry ``_downstreamId``, which never
appears in the attribute tree or in SCIM responses.

Usage:
    # Store → resource
    resource = ScimTransformer.document_to_resource(document)

    # Resource → store
    document = ScimTransformer.resource_to_document(resource, USER_RESOURCE_TYPE)

    # Resource → SCIM response body
    body = ScimTransformer.resource_to_scim(resource)
"""
from __future__ import annotations
import copy
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.core.resource import (
    RESERVED_KEYS,
    SCIM_USER_SCHEMA,
    ZERO_TIME,
    Attributes,
    Meta,
    Resource,
    ResourceType,
)

# Storage key (case-folded) -> Meta field
META_STORAGE_FIELDS = {
    "resourcetype": "resource_type",
    "created": "created",
    "lastmodified": "last_modified",
    "version": "version",
    "location": "location",
}

# Meta field -> SCIM attribute name
META_SCIM_NAMES = {
    "resource_type": "resourceType",
    "created": "created",
    "last_modified": "lastModified",
    "version": "version",
    "location": "location",
}

# Driver-added or server-internal keys that never belong to the attribute tree
DOWNSTREAM_ID_KEY = "_downstreamId"
STORAGE_ONLY_KEYS = ("_id", DOWNSTREAM_ID_KEY)

# Fractional seconds directly before the offset (or the end of the string)
_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d{2}:\d{2}$|$)")


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as RFC 3339 in UTC with a ``Z`` suffix.

    Values that fall outside the representable range once shifted to UTC
    (e.g. ``0001-01-01T00:00:00+07:00``) render as ``ZERO_TIME``.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    try:
        value = value.astimezone(timezone.utc)
    except OverflowError:
        value = ZERO_TIME
    return value.isoformat().replace("+00:00", "Z")


def _normalize_rfc3339(text: str) -> str:
    # fromisoformat before 3.11 takes neither "Z" nor fractions other than 3 or 6 digits
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored timestamp. Unparseable values yield ``ZERO_TIME``."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str):
        return ZERO_TIME
    try:
        parsed = datetime.fromisoformat(_normalize_rfc3339(value.strip()))
    except ValueError:
        return ZERO_TIME
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def prune_nulls(tree: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``tree`` with null-valued keys removed at every depth.

    Mappings nested inside lists are pruned too; other list elements pass
    through unchanged.
    """
    pruned: Dict[str, Any] = {}
    for key, value in tree.items():
        if value is None:
            continue
        if isinstance(value, dict):
            pruned[key] = prune_nulls(value)
        elif isinstance(value, list):
            pruned[key] = [
                prune_nulls(element) if isinstance(element, dict) else copy.deepcopy(element)
                for element in value
            ]
        else:
            pruned[key] = value
    return pruned


class ScimTransformer:
    """Bidirectional transformer between stored documents and resources."""

    @staticmethod
    def extract_meta(raw_meta: Any) -> Meta:
        """Rehydrate ``Meta`` from a stored ``meta`` sub-document.

        Keys are matched case-insensitively. A missing sub-document, or one
        lacking ``resourcetype`` or ``location``, yields the zero ``Meta``.
        ``created``, ``lastmodified`` and ``version`` are independently optional.
        """
        if not isinstance(raw_meta, dict):
            return Meta()

        fields: Dict[str, Any] = {}
        for key, value in raw_meta.items():
            field_name = META_STORAGE_FIELDS.get(str(key).lower())
            if field_name:
                fields[field_name] = value

        resource_type = fields.get("resource_type")
        location = fields.get("location")
        if not isinstance(resource_type, str) or not isinstance(location, str):
            return Meta()

        meta = Meta(resource_type=resource_type, location=location)
        if "created" in fields:
            meta.created = parse_timestamp(fields["created"])
        if "last_modified" in fields:
            meta.last_modified = parse_timestamp(fields["last_modified"])
        if "version" in fields:
            version = fields["version"]
            meta.version = version if isinstance(version, str) else str(version)
        return meta

    @staticmethod
    def split_document(document: Dict[str, Any]):
        """Split a stored or incoming mapping into its typed parts.

        Returns:
            Tuple of (id, externalId or None, pruned attribute tree, Meta)
        """
        resource_id = document.get("id")
        if not isinstance(resource_id, str):
            resource_id = ""

        external_id = document.get("externalId")
        if not isinstance(external_id, str):
            external_id = None

        attributes = prune_nulls({
            key: value
            for key, value in document.items()
            if key not in RESERVED_KEYS and key not in STORAGE_ONLY_KEYS
        })

        meta = ScimTransformer.extract_meta(document.get("meta"))
        return resource_id, external_id, attributes, meta

    @staticmethod
    def document_to_resource(document: Dict[str, Any]) -> Resource:
        """Convert a persisted document to a ``Resource``.

        Example:
            >>> doc = {
            ...     "id": "abc",
            ...     "userName": "alice",
            ...     "nickName": None,
            ...     "meta": {"resourcetype": "User", "location": "Users/abc"},
            ... }
            >>> resource = ScimTransformer.document_to_resource(doc)
            >>> resource.attributes
            {'userName': 'alice'}
            >>> resource.meta.resource_type
            'User'
        """
        resource_id, external_id, attributes, meta = ScimTransformer.split_document(document)
        downstream_id = document.get(DOWNSTREAM_ID_KEY)
        return Resource(
            id=resource_id,
            external_id=external_id,
            attributes=attributes,
            meta=meta,
            downstream_id=downstream_id if isinstance(downstream_id, str) else None,
        )

    @staticmethod
    def resource_to_document(resource: Resource, resource_type: ResourceType) -> Dict[str, Any]:
        """Flatten a ``Resource`` into one document suitable for storage."""
        document: Dict[str, Any] = copy.deepcopy(dict(resource.attributes))
        for key in RESERVED_KEYS + STORAGE_ONLY_KEYS:
            document.pop(key, None)

        document["id"] = resource.id
        if resource.external_id is not None:
            document["externalId"] = resource.external_id
        if resource.downstream_id is not None:
            document[DOWNSTREAM_ID_KEY] = resource.downstream_id

        meta = resource.meta
        stored_meta: Dict[str, Any] = {
            "resourcetype": meta.resource_type or resource_type.name,
            "location": meta.location or resource_type.location(resource.id),
        }
        if meta.created is not None:
            stored_meta["created"] = format_timestamp(meta.created)
        if meta.last_modified is not None:
            stored_meta["lastmodified"] = format_timestamp(meta.last_modified)
        if meta.version:
            stored_meta["version"] = meta.version
        document["meta"] = stored_meta
        return document

    @staticmethod
    def resource_to_scim(resource: Resource, schemas: Optional[list] = None) -> Dict[str, Any]:
        """Render a ``Resource`` as a SCIM response body."""
        scim_resource: Dict[str, Any] = {
            "schemas": list(schemas or [SCIM_USER_SCHEMA]),
            "id": resource.id,
        }
        if resource.external_id is not None:
            scim_resource["externalId"] = resource.external_id
        for key, value in resource.attributes.items():
            if key not in RESERVED_KEYS and key != "schemas":
                scim_resource[key] = copy.deepcopy(value)

        meta: Dict[str, Any] = {}
        for field_name, scim_name in META_SCIM_NAMES.items():
            value = getattr(resource.meta, field_name)
            if isinstance(value, datetime):
                meta[scim_name] = format_timestamp(value)
            elif value:
                meta[scim_name] = value
        if meta:
            scim_resource["meta"] = meta
        return scim_resource

    @staticmethod
    def scim_to_attributes(payload: Dict[str, Any]) -> Attributes:
        """Strip server-managed keys (``schemas``, ``id``, ``meta``) from an incoming body.

        ``externalId`` is kept: the handler extracts it from the attributes.
        """
        return {
            key: copy.deepcopy(value)
            for key, value in payload.items()
            if key not in ("schemas", "id", "meta")
        }
