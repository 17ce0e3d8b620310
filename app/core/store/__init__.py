"""Document store package.

Architecture:
- base.py: DocumentStore contract (insert, find_by_id, list_all, delete_by_id)
- mongo.py: MongoDB backend (pymongo)
- memory.py: In-process backend for demo mode and tests
- exceptions.py: StoreError

Usage:
    from app.core.store import MongoDocumentStore

    store = MongoDocumentStore.connect("mongodb://mongo:27017", "scim", "users")
    store.insert({"id": "abc", "userName": "alice"})
"""
from .base import Document, DocumentStore
from .exceptions import StoreError
from .memory import InMemoryDocumentStore
from .mongo import MongoDocumentStore

__all__ = [
    "Document",
    "DocumentStore",
    "StoreError",
    "InMemoryDocumentStore",
    "MongoDocumentStore",
]
