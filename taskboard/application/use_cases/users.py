"""User use cases: list, create, retrieve, replace, delete.

A pendingTasks list sent by the client is authoritative for that user:
added ids are claimed (assigned, completed reset) and removed ids are
released. All claims are checked before the first write.
"""

from __future__ import annotations

import logging
from typing import Any

from taskboard.application.dtos.user import UserWrite
from taskboard.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)
from taskboard.application.services.assignment_sync import (
    AssignmentSynchronizer,
    PendingDiff,
    SyncJournal,
    dedupe,
    diff_pending,
)
from taskboard.application.services.query_translator import QueryTranslator
from taskboard.domain.entities import UserEntity
from taskboard.domain.exceptions import (
    DuplicateEmailException,
    ResourceNotFoundException,
    ValidationException,
)
from taskboard.domain.query import StoreQuery
from taskboard.domain.schema import USER_SCHEMA
from taskboard.shared.utils.datetime import utc_now
from taskboard.shared.utils.generators import generate_cuid, is_valid_id

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Validation Error: 'name' and 'email' are required fields."


def _require_fields(body: UserWrite) -> None:
    missing = [
        f for f in ("name", "email") if not (getattr(body, f) or "").strip()
    ]
    if missing:
        raise ValidationException(REQUIRED_FIELDS_MESSAGE, fields=missing)


class UserService:
    """CRUD for users with assignment integrity."""

    def __init__(
        self,
        user_repo: IUserRepository,
        task_repo: ITaskRepository,
        default_limit: int | None = None,
    ) -> None:
        self._user_repo = user_repo
        self._task_repo = task_repo
        self._sync = AssignmentSynchronizer(task_repo, user_repo)
        self._translator = QueryTranslator(USER_SCHEMA, default_limit=default_limit)

    async def list_users(self, **params: str | None) -> list[dict[str, Any]] | int:
        """Return matching user documents, or their number when count=true."""
        query = self._translator.translate(**params)
        return await self.run_query(query)

    async def run_query(self, query: StoreQuery) -> list[dict[str, Any]] | int:
        if query.matches_nothing:
            return 0 if query.count else []
        if query.count:
            return await self._user_repo.count(query.conditions)
        return await self._user_repo.find(query)

    async def get_user(self, user_id: str, select: str | None = None) -> dict[str, Any]:
        projection = self._translator.parse_select(select)
        if not is_valid_id(user_id):
            raise ResourceNotFoundException("user", user_id)
        doc = await self._user_repo.get_document(user_id, projection)
        if doc is None:
            raise ResourceNotFoundException("user", user_id)
        return doc

    async def _ensure_email_free(self, email: str, user_id: str | None = None) -> None:
        """Reject an email owned by another user before any write happens."""
        owner = await self._user_repo.get_by_email(email)
        if owner is not None and owner.id != user_id:
            raise DuplicateEmailException(email)

    async def create_user(self, body: UserWrite) -> UserEntity:
        _require_fields(body)
        pending = dedupe(body.pending_tasks or [])
        await self._ensure_email_free(body.email)
        await self._sync.check_claims(None, pending)

        user = UserEntity(
            id=generate_cuid(),
            name=body.name,
            email=body.email,
            pending_tasks=pending,
            date_created=utc_now(),
        )
        journal = SyncJournal(f"create user {user.id}")
        with journal.guard():
            created = await self._user_repo.create(user)
            journal.record(f"inserted user {created.id}")
            await self._sync.apply_pending_diff(
                created, PendingDiff(added=pending, removed=[]), journal
            )
        logger.info("User created: %s (%d pending task(s))", created.id, len(pending))
        return created

    async def replace_user(self, user_id: str, body: UserWrite) -> UserEntity:
        """Full replace. An absent pendingTasks keeps the stored list."""
        if not is_valid_id(user_id):
            raise ResourceNotFoundException("user", user_id)
        existing = await self._user_repo.get_by_id(user_id)
        if existing is None:
            raise ResourceNotFoundException("user", user_id)
        _require_fields(body)
        await self._ensure_email_free(body.email, user_id)

        if body.pending_tasks is None:
            pending = list(existing.pending_tasks)
            diff = PendingDiff(added=[], removed=[])
        else:
            pending = dedupe(body.pending_tasks)
            diff = diff_pending(existing.pending_tasks, pending)
            await self._sync.check_claims(user_id, diff.added)

        updated = UserEntity(
            id=existing.id,
            name=body.name,
            email=body.email,
            pending_tasks=pending,
            date_created=existing.date_created,
        )
        journal = SyncJournal(f"replace user {user_id}")
        with journal.guard():
            await self._sync.apply_pending_diff(updated, diff, journal)
            saved = await self._user_repo.replace(updated)
            if saved is None:
                raise ResourceNotFoundException("user", user_id)
            journal.record(f"replaced user {user_id}")
            if saved.name != existing.name:
                await self._sync.refresh_assignee_name(saved, journal)
        logger.info(
            "User replaced: %s (+%d/-%d pending)", user_id, len(diff.added), len(diff.removed)
        )
        return saved

    async def delete_user(self, user_id: str) -> UserEntity:
        """Delete and return the user; every task assigned to it becomes unassigned."""
        if not is_valid_id(user_id):
            raise ResourceNotFoundException("user", user_id)
        deleted = await self._user_repo.delete(user_id)
        if deleted is None:
            raise ResourceNotFoundException("user", user_id)
        journal = SyncJournal(f"delete user {user_id}", [f"deleted user {user_id}"])
        with journal.guard():
            released = await self._sync.release_user(user_id, journal)
        logger.info("User deleted: %s (released %d task(s))", user_id, released)
        return deleted
