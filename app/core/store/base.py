"""Document store contract consumed by the resource handler."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List


Document = Dict[str, Any]


class DocumentStore(ABC):
    """Persistence over opaque attribute documents addressed by their ``id`` field.

    Every call is an independent bounded operation; no transaction spans
    multiple calls.
    """

    @abstractmethod
    def insert(self, document: Document) -> None:
        """Persist a new document.

        Raises:
            StoreError: On connectivity or constraint failure
        """

    @abstractmethod
    def find_by_id(self, resource_id: str) -> Document:
        """Return the document whose ``id`` equals ``resource_id``.

        Returns:
            The document, or an empty dict if none exists
        """

    @abstractmethod
    def list_all(self) -> List[Document]:
        """Return every document in storage-defined order."""

    @abstractmethod
    def delete_by_id(self, resource_id: str) -> None:
        """Remove the document with that ``id``; a no-op if absent."""

    def ping(self) -> None:
        """Check the backend is reachable. Raises StoreError when it is not."""

    def close(self) -> None:
        """Release backend connections."""
