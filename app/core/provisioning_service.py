"""
Provisioning Service Layer: SCIM resource lifecycle

This module implements the six-operation handler contract (create, get,
get_all, replace, delete, patch) consumed by the SCIM API blueprint. Each
call is one synchronous request/response cycle composing the document
store, the normalizer, the patch engine, pagination, and (on mutation) the
downstream provisioning forwarder.

Architecture:
    SCIM API (/scim/v2/*) ──> UserResourceHandler ──> DocumentStore (MongoDB)
                                                  └─> ProvisioningClient ──> downstream IdP

Consistency:
    Replace and Patch are read, delete, insert as three independent store
    calls with no lock or transaction. Concurrent mutations of one id can
    interleave and the last insert wins. If the insert fails after the
    delete, the resource is gone and InternalError is returned; nothing is
    rolled back.

Forwarding:
    - create: forwarded BEFORE the local insert. A ForwardError propagates
      and nothing is stored. The downstream id is kept on the stored
      document and addresses every later update and delete.
    - update/delete: forwarded AFTER the local mutation to
      base/<downstream id>, falling back to externalId, then id. Failures
      are logged as warnings and the local change stands.
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from app.core.exceptions import ForwardError, InternalError, ResourceNotFoundError
from app.core.pagination import paginate
from app.core.patch import PATCH_OP_REPLACE, PATCH_OP_SCHEMA, apply_patch
from app.core.provisioning_client import ProvisioningClient
from app.core.resource import (
    USER_RESOURCE_TYPE,
    Attributes,
    Meta,
    Page,
    PatchOperation,
    Resource,
    ResourceType,
)
from app.core.scim_transformer import ScimTransformer
from app.core.store import Document, DocumentStore, StoreError

logger = logging.getLogger(__name__)

PATCH_VERSION_SUFFIX = ".patch"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class HandlerConfig:
    """Process-wide collaborators, built once at startup and shared by all requests."""
    store: DocumentStore
    resource_type: ResourceType = USER_RESOURCE_TYPE
    provisioner: Optional[ProvisioningClient] = None
    clock: Callable[[], datetime] = field(default=_utcnow)
    id_factory: Callable[[], str] = field(default=_new_id)


class UserResourceHandler:
    """Resource lifecycle engine for one resource type."""

    def __init__(self, config: HandlerConfig):
        self.config = config
        self.store = config.store
        self.resource_type = config.resource_type
        self.provisioner = config.provisioner

    # ─────────────────────────────────────────────────────────────────────
    # Handler contract
    # ─────────────────────────────────────────────────────────────────────

    def create(self, attributes: Attributes) -> Resource:
        """Create a resource with a fresh id.

        Raises:
            ForwardError: Downstream create failed (nothing stored)
            InternalError: Store insert failed
        """
        resource_id = self.config.id_factory()
        now = self.config.clock()
        _, external_id, attrs, _ = ScimTransformer.split_document(attributes)

        resource = Resource(
            id=resource_id,
            external_id=external_id,
            attributes=attrs,
            meta=Meta(
                resource_type=self.resource_type.name,
                created=now,
                last_modified=now,
                version=f"v{resource_id[:8]}",
                location=self.resource_type.location(resource_id),
            ),
        )

        if self.provisioner is not None:
            result = self.provisioner.forward_create(self._forward_body(resource))
            resource.downstream_id = result.id
            if resource.external_id is None:
                resource.external_id = result.id
            logger.info(
                f"Create forwarded | id={resource_id} | "
                f"downstream_id={result.id} | downstream_external_id={result.external_id}"
            )

        self._insert(resource)
        logger.info(f"Created {self.resource_type.name} | id={resource_id}")
        return resource

    def get(self, resource_id: str) -> Resource:
        """Return the resource with ``resource_id``.

        Raises:
            ResourceNotFoundError: No such resource
            InternalError: Store lookup failed
        """
        return ScimTransformer.document_to_resource(self._find(resource_id))

    def get_all(self, start_index: int, count: int) -> Page:
        """Return one page of resources (``start_index`` is 1-based)."""
        try:
            documents = self.store.list_all()
        except StoreError as exc:
            logger.error(f"Store list failed | error={exc}", exc_info=True)
            raise InternalError() from exc

        if not documents:
            return Page(total_results=0, resources=[])

        selected, total = paginate(documents, start_index, count)
        return Page(
            total_results=total,
            resources=[ScimTransformer.document_to_resource(doc) for doc in selected],
        )

    def replace(self, resource_id: str, attributes: Attributes) -> Resource:
        """Replace every attribute of an existing resource.

        ``created`` and ``version`` carry over; ``lastModified`` is now.
        """
        previous = ScimTransformer.document_to_resource(self._find(resource_id))
        self._delete(resource_id)

        _, external_id, attrs, _ = ScimTransformer.split_document(attributes)
        resource = Resource(
            id=resource_id,
            external_id=external_id,
            attributes=attrs,
            meta=Meta(
                resource_type=self.resource_type.name,
                created=previous.meta.created,
                last_modified=self.config.clock(),
                version=previous.meta.version,
                location=self.resource_type.location(resource_id),
            ),
            downstream_id=previous.downstream_id,
        )
        self._insert(resource, after_delete=True)
        logger.info(f"Replaced {self.resource_type.name} | id={resource_id}")

        self._forward_update(resource, [
            PatchOperation(op=PATCH_OP_REPLACE, value=self._forward_body(resource)),
        ])
        return resource

    def delete(self, resource_id: str) -> None:
        """Permanently remove a resource."""
        previous = ScimTransformer.document_to_resource(self._find(resource_id))
        self._delete(resource_id)
        logger.info(f"Deleted {self.resource_type.name} | id={resource_id}")

        if self.provisioner is not None:
            target = self._downstream_id(previous)
            try:
                self.provisioner.forward_delete(target)
            except ForwardError as exc:
                logger.warning(f"Provisioning delete not replicated | id={resource_id} | error={exc}")

    def patch(self, resource_id: str, operations: Iterable[PatchOperation]) -> Resource:
        """Apply patch operations in order and store the result.

        Raises:
            InvalidPatchError: Malformed operation (nothing is changed)
        """
        operations = list(operations)
        previous = ScimTransformer.document_to_resource(self._find(resource_id))

        working: Dict[str, Any] = dict(previous.attributes)
        if previous.external_id is not None:
            working["externalId"] = previous.external_id
        patched = apply_patch(working, operations)

        self._delete(resource_id)

        _, external_id, attrs, _ = ScimTransformer.split_document(patched)
        resource = Resource(
            id=resource_id,
            external_id=external_id,
            attributes=attrs,
            meta=Meta(
                resource_type=previous.meta.resource_type or self.resource_type.name,
                created=previous.meta.created,
                last_modified=self.config.clock(),
                version=previous.meta.version + PATCH_VERSION_SUFFIX,
                location=previous.meta.location or self.resource_type.location(resource_id),
            ),
            downstream_id=previous.downstream_id,
        )
        self._insert(resource, after_delete=True)
        logger.info(f"Patched {self.resource_type.name} | id={resource_id} | operations={len(operations)}")

        self._forward_update(resource, operations)
        return resource

    # ─────────────────────────────────────────────────────────────────────
    # Store helpers
    # ─────────────────────────────────────────────────────────────────────

    def _find(self, resource_id: str) -> Document:
        try:
            document = self.store.find_by_id(resource_id)
        except StoreError as exc:
            logger.error(f"Store find failed | id={resource_id} | error={exc}", exc_info=True)
            raise InternalError() from exc
        if not document:
            raise ResourceNotFoundError(resource_id)
        return document

    def _insert(self, resource: Resource, after_delete: bool = False) -> None:
        document = ScimTransformer.resource_to_document(resource, self.resource_type)
        try:
            self.store.insert(document)
        except StoreError as exc:
            if after_delete:
                logger.error(
                    f"Store insert failed after delete, resource lost | id={resource.id} | error={exc}",
                    exc_info=True,
                )
            else:
                logger.error(f"Store insert failed | id={resource.id} | error={exc}", exc_info=True)
            raise InternalError() from exc

    def _delete(self, resource_id: str) -> None:
        try:
            self.store.delete_by_id(resource_id)
        except StoreError as exc:
            logger.error(f"Store delete failed | id={resource_id} | error={exc}", exc_info=True)
            raise InternalError() from exc

    # ─────────────────────────────────────────────────────────────────────
    # Forwarding helpers
    # ─────────────────────────────────────────────────────────────────────

    @staticmethod
    def _forward_body(resource: Resource) -> Dict[str, Any]:
        body: Dict[str, Any] = dict(resource.attributes)
        if resource.external_id is not None:
            body["externalId"] = resource.external_id
        return body

    @staticmethod
    def _downstream_id(resource: Resource) -> str:
        return resource.downstream_id or resource.external_id or resource.id

    def _forward_update(self, resource: Resource, operations: List[PatchOperation]) -> None:
        if self.provisioner is None:
            return
        body = {
            "schemas": [PATCH_OP_SCHEMA],
            "Operations": [operation.to_dict() for operation in operations],
        }
        try:
            self.provisioner.forward_update(self._downstream_id(resource), body)
        except ForwardError as exc:
            logger.warning(f"Provisioning update not replicated | id={resource.id} | error={exc}")
