"""Document store factory: creates the memory or Firestore backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskboard.infrastructure.collections import UNIQUE_FIELDS
from taskboard.infrastructure.store.protocol import DocumentStore

if TYPE_CHECKING:
    from taskboard.core.config import Settings


class StoreFactory:
    """Factory for document store instances based on configuration."""

    @staticmethod
    def create_document_store(settings: "Settings | None" = None) -> DocumentStore:
        """Create document store from settings.

        Args:
            settings: Application settings; if None, uses get_settings().

        Returns:
            MemoryDocumentStore or FirestoreDocumentStore.

        Raises:
            ValueError: Unknown backend or missing required config.
        """
        from taskboard.core.config import get_settings

        s = settings or get_settings()
        backend = s.database_backend.lower()

        if backend == "memory":
            from taskboard.infrastructure.store.memory import MemoryDocumentStore

            return MemoryDocumentStore(unique_fields=UNIQUE_FIELDS)
        if backend == "firestore":
            from taskboard.infrastructure.firebase import (
                FirestoreDocumentStore,
                create_firestore_client,
            )

            return FirestoreDocumentStore(create_firestore_client(s))
        raise ValueError(
            f"Unknown database backend: {backend}. Supported: 'memory', 'firestore'"
        )
