"""Firestore integration (REST API, no firebase-admin)."""

from taskboard.infrastructure.firebase.client import create_firestore_client
from taskboard.infrastructure.firebase.store import FirestoreDocumentStore

__all__ = [
    "FirestoreDocumentStore",
    "create_firestore_client",
]
