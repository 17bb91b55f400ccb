"""User repository over a DocumentStore (implements IUserRepository)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from taskboard.domain.entities import UserEntity
from taskboard.domain.exceptions import DuplicateEmailException
from taskboard.domain.query import Condition, Projection, StoreQuery, eq
from taskboard.infrastructure.collections import COLLECTION_USERS
from taskboard.infrastructure.store.errors import DuplicateKeyError
from taskboard.infrastructure.store.protocol import DocumentStore

PENDING_FIELD = "pendingTasks"


class UserRepository:
    """User persistence. Email uniqueness is enforced by the store."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def find(self, query: StoreQuery) -> list[dict[str, Any]]:
        """Return user documents for a translated query."""
        return await self._store.find(COLLECTION_USERS, query)

    async def count(self, conditions: Sequence[Condition]) -> int:
        return await self._store.count(COLLECTION_USERS, conditions)

    async def get_document(
        self, user_id: str, projection: Projection | None = None
    ) -> dict[str, Any] | None:
        """Return the (optionally projected) user document, or None."""
        return await self._store.get(COLLECTION_USERS, user_id, projection)

    async def get_by_id(self, user_id: str) -> UserEntity | None:
        doc = await self._store.get(COLLECTION_USERS, user_id)
        return UserEntity.from_document(doc) if doc else None

    async def get_by_email(self, email: str) -> UserEntity | None:
        """Return the user owning email (server-side where query, at most one doc)."""
        docs = await self._store.find(
            COLLECTION_USERS, StoreQuery(conditions=(eq("email", email),), limit=1)
        )
        return UserEntity.from_document(docs[0]) if docs else None

    async def create(self, user: UserEntity) -> UserEntity:
        """Create user; raise DuplicateEmailException if the email is taken."""
        try:
            doc = await self._store.insert(COLLECTION_USERS, user.to_document())
        except DuplicateKeyError as e:
            if e.field == "email":
                raise DuplicateEmailException(user.email) from None
            raise
        return UserEntity.from_document(doc)

    async def replace(self, user: UserEntity) -> UserEntity | None:
        """Overwrite user; raise DuplicateEmailException if the email is taken."""
        try:
            doc = await self._store.replace(COLLECTION_USERS, user.id, user.to_document())
        except DuplicateKeyError as e:
            if e.field == "email":
                raise DuplicateEmailException(user.email) from None
            raise
        return UserEntity.from_document(doc) if doc else None

    async def delete(self, user_id: str) -> UserEntity | None:
        doc = await self._store.delete(COLLECTION_USERS, user_id)
        return UserEntity.from_document(doc) if doc else None

    async def add_pending(self, user_id: str, task_id: str) -> bool:
        """Add task_id to the user's pendingTasks (no duplicate). False if user missing."""
        return await self._store.add_to_array(COLLECTION_USERS, user_id, PENDING_FIELD, [task_id])

    async def remove_pending(self, user_id: str, task_id: str) -> bool:
        """Remove task_id from the user's pendingTasks. False if user missing."""
        return await self._store.remove_from_array(
            COLLECTION_USERS, user_id, PENDING_FIELD, [task_id]
        )
