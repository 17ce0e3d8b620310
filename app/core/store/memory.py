"""In-process document store used in demo mode and tests."""
from __future__ import annotations
import copy
import threading
from typing import List

from .base import Document, DocumentStore


class InMemoryDocumentStore(DocumentStore):
    """Insertion-ordered store guarded by a lock.

    Documents are deep-copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self):
        self._documents: dict[str, Document] = {}
        self._lock = threading.Lock()

    def insert(self, document: Document) -> None:
        with self._lock:
            self._documents[str(document.get("id", ""))] = copy.deepcopy(document)

    def find_by_id(self, resource_id: str) -> Document:
        with self._lock:
            document = self._documents.get(resource_id)
            return copy.deepcopy(document) if document is not None else {}

    def list_all(self) -> List[Document]:
        with self._lock:
            return [copy.deepcopy(doc) for doc in self._documents.values()]

    def delete_by_id(self, resource_id: str) -> None:
        with self._lock:
            self._documents.pop(resource_id, None)

    def __len__(self) -> int:
        return len(self._documents)
