"""MongoDB-backed document store.

One ``MongoClient`` is created per process and shared by every request;
pymongo's pool makes it safe to use from concurrent worker threads.
"""
from __future__ import annotations
import logging
from typing import Any, List, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.errors import PyMongoError

from .base import Document, DocumentStore
from .exceptions import StoreError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5


class MongoDocumentStore(DocumentStore):
    """Document store over a single MongoDB collection.

    Usage:
        store = MongoDocumentStore.connect("mongodb://mongo:27017", "scim", "users")
        store.insert({"id": "abc", "userName": "alice"})
        user = store.find_by_id("abc")
    """

    def __init__(self, collection: Any, client: Optional[MongoClient] = None):
        """Wrap an existing collection handle.

        Args:
            collection: pymongo ``Collection`` (or compatible object)
            client: Owning client, closed by ``close()``
        """
        self.collection = collection
        self.client = client

    @classmethod
    def connect(
        cls,
        connection_string: str,
        database: str,
        collection: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> "MongoDocumentStore":
        """Open a client with bounded timeouts and verify the primary is reachable.

        Raises:
            StoreError: If the client cannot be created or the ping fails
        """
        timeout_ms = int(timeout_seconds * 1000)
        try:
            client = MongoClient(
                connection_string,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
                socketTimeoutMS=timeout_ms,
                timeoutMS=timeout_ms,
            )
        except PyMongoError as exc:
            raise StoreError("connect", str(exc)) from exc

        store = cls(client[database][collection], client=client)
        store.ping()
        logger.info(f"MongoDB connected | database={database} | collection={collection}")
        return store

    def ping(self) -> None:
        if self.client is None:
            return
        try:
            self.client.admin.command("ping")
        except PyMongoError as exc:
            raise StoreError("ping", str(exc)) from exc

    def insert(self, document: Document) -> None:
        try:
            # insert_one adds ``_id`` to the mapping it is given
            self.collection.insert_one(dict(document))
        except PyMongoError as exc:
            raise StoreError("insert", str(exc)) from exc

    def find_by_id(self, resource_id: str) -> Document:
        try:
            document = self.collection.find_one({"id": resource_id}, {"_id": False})
        except PyMongoError as exc:
            raise StoreError("find", str(exc)) from exc
        return document or {}

    def list_all(self) -> List[Document]:
        try:
            cursor = self.collection.find({}, {"_id": False}).sort("_id", ASCENDING)
            return list(cursor)
        except PyMongoError as exc:
            raise StoreError("list", str(exc)) from exc

    def delete_by_id(self, resource_id: str) -> None:
        try:
            self.collection.delete_one({"id": resource_id})
        except PyMongoError as exc:
            raise StoreError("delete", str(exc)) from exc

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
