"""Document store: protocol, backends (memory, Firestore) and factory."""

from taskboard.infrastructure.store.errors import DuplicateKeyError
from taskboard.infrastructure.store.memory import MemoryDocumentStore
from taskboard.infrastructure.store.protocol import DocumentStore

__all__ = [
    "DocumentStore",
    "DuplicateKeyError",
    "MemoryDocumentStore",
]
