"""Document store protocol (DIP). Implementations: MemoryDocumentStore, FirestoreDocumentStore.

Documents are plain dicts keyed by wire field names, with the identifier
under "_id". Every method is atomic on its own; nothing spans calls.
"""

from collections.abc import Sequence
from typing import Any, Protocol

from taskboard.domain.query import Condition, Projection, StoreQuery


class DocumentStore(Protocol):
    """Protocol for document store backends."""

    async def find(self, collection: str, query: StoreQuery) -> list[dict[str, Any]]:
        """Return documents matching query (filter, sort, skip, limit, projection)."""
        ...

    async def count(self, collection: str, conditions: Sequence[Condition]) -> int:
        """Return the number of documents matching all conditions."""
        ...

    async def get(
        self,
        collection: str,
        doc_id: str,
        projection: Projection | None = None,
    ) -> dict[str, Any] | None:
        """Return one document by id, or None."""
        ...

    async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        """Insert a document (its _id is set by the caller). Raises DuplicateKeyError."""
        ...

    async def replace(
        self, collection: str, doc_id: str, document: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Overwrite a document; return it, or None if missing. Raises DuplicateKeyError."""
        ...

    async def delete(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Delete a document; return the deleted document, or None if missing."""
        ...

    async def update_many(
        self,
        collection: str,
        conditions: Sequence[Condition],
        changes: dict[str, Any],
    ) -> int:
        """Set fields on every matching document; return how many matched."""
        ...

    async def add_to_array(
        self, collection: str, doc_id: str, field: str, values: Sequence[Any]
    ) -> bool:
        """Append values not already present; return False if the document is missing."""
        ...

    async def remove_from_array(
        self, collection: str, doc_id: str, field: str, values: Sequence[Any]
    ) -> bool:
        """Remove all occurrences of values; return False if the document is missing."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...
