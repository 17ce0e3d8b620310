"""Demo data: enough users to exercise pagination."""
from __future__ import annotations
from typing import List

from app.core.resource import USER_RESOURCE_TYPE, ResourceType
from app.core.store import Document, DocumentStore

DEMO_USER_COUNT = 20


def demo_documents(count: int = DEMO_USER_COUNT, resource_type: ResourceType = USER_RESOURCE_TYPE) -> List[Document]:
    """Build ``count`` stored user documents (``user1`` … ``user<count>``)."""
    documents = []
    for i in range(1, count + 1):
        resource_id = f"{i:04d}"
        documents.append({
            "id": resource_id,
            "externalId": f"external{i}",
            "userName": f"user{i}",
            "meta": {
                "resourcetype": resource_type.name,
                "created": f"2020-01-{(i - 1) % 28 + 1:02d}T15:04:05+07:00",
                "lastmodified": f"2020-02-{(i - 1) % 28 + 1:02d}T16:05:04+07:00",
                "version": f"v{i}",
                "location": resource_type.location(resource_id),
            },
        })
    return documents


def seed_demo_users(store: DocumentStore, count: int = DEMO_USER_COUNT) -> int:
    """Insert demo users that are not already present. Returns the number inserted."""
    inserted = 0
    for document in demo_documents(count):
        if store.find_by_id(document["id"]):
            continue
        store.insert(document)
        inserted += 1
    return inserted
