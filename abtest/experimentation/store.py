"""Document store abstraction used by the experimentation engine.

The engine only needs collections of JSON-like documents addressed by id,
an atomic create-if-absent, and equality queries on a single field. Any
backend offering those (Firestore, MongoDB, a SQL table of JSON blobs)
can implement ``DocumentStore``.
"""

import copy
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Any


class DocumentNotFoundError(KeyError):
    """Raised by ``update`` when the target document does not exist."""


class DocumentStore(ABC):
    """Abstract base class for document storage backends."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Return a copy of the document, or None if absent."""
        pass

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or overwrite a document."""
        pass

    @abstractmethod
    async def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> bool:
        """Atomically create a document if no document has this id.

        Returns:
            True if the document was written, False if one already existed.
        """
        pass

    @abstractmethod
    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge fields into an existing document."""
        pass

    @abstractmethod
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Store a document under a generated id and return the id."""
        pass

    @abstractmethod
    async def query(self, collection: str, field: str, value: Any) -> list[dict[str, Any]]:
        """Return documents whose ``field`` equals ``value``, in insertion order."""
        pass


class InMemoryDocumentStore(DocumentStore):
    """In-memory document storage for development/testing."""

    def __init__(self):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self._lock:
            doc = self._collection(collection).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._collection(collection)[doc_id] = copy.deepcopy(data)

    async def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> bool:
        with self._lock:
            docs = self._collection(collection)
            if doc_id in docs:
                return False
            docs[doc_id] = copy.deepcopy(data)
            return True

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        with self._lock:
            docs = self._collection(collection)
            if doc_id not in docs:
                raise DocumentNotFoundError(f"{collection}/{doc_id}")
            docs[doc_id].update(copy.deepcopy(fields))

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        with self._lock:
            self._collection(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    async def query(self, collection: str, field: str, value: Any) -> list[dict[str, Any]]:
        with self._lock:
            return [
                copy.deepcopy(doc)
                for doc in self._collection(collection).values()
                if doc.get(field) == value
            ]

    def count(self, collection: str) -> int:
        """Number of documents in a collection."""
        with self._lock:
            return len(self._collection(collection))

    def clear(self) -> None:
        """Clear all collections."""
        with self._lock:
            self._collections.clear()
