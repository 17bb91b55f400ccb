"""Task use cases: list, create, retrieve, replace, delete.

Every mutation keeps the assignee's pendingTasks in step with the task
(see AssignmentSynchronizer). The reciprocal user write happens before the
task write on replace and after it on create/delete.
"""

from __future__ import annotations

import logging
from typing import Any

from taskboard.application.dtos.task import TaskWrite
from taskboard.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)
from taskboard.application.services.assignment_sync import (
    AssignmentState,
    AssignmentSynchronizer,
    SyncJournal,
)
from taskboard.application.services.query_translator import QueryTranslator
from taskboard.domain.entities import UNASSIGNED, UNASSIGNED_NAME, TaskEntity, UserEntity
from taskboard.domain.exceptions import ResourceNotFoundException, ValidationException
from taskboard.domain.query import StoreQuery
from taskboard.domain.schema import TASK_SCHEMA
from taskboard.shared.utils.datetime import ensure_utc, utc_now
from taskboard.shared.utils.generators import generate_cuid, is_valid_id

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Validation Error: 'name' and 'deadline' are required fields."


def _require_fields(body: TaskWrite) -> None:
    missing = []
    if not body.name or not body.name.strip():
        missing.append("name")
    if body.deadline is None:
        missing.append("deadline")
    if missing:
        raise ValidationException(REQUIRED_FIELDS_MESSAGE, fields=missing)


class TaskService:
    """CRUD for tasks with assignment integrity."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        user_repo: IUserRepository,
        default_limit: int | None = 100,
    ) -> None:
        self._task_repo = task_repo
        self._user_repo = user_repo
        self._sync = AssignmentSynchronizer(task_repo, user_repo)
        self._translator = QueryTranslator(TASK_SCHEMA, default_limit=default_limit)

    async def list_tasks(self, **params: str | None) -> list[dict[str, Any]] | int:
        """Return matching task documents, or their number when count=true."""
        query = self._translator.translate(**params)
        return await self.run_query(query)

    async def run_query(self, query: StoreQuery) -> list[dict[str, Any]] | int:
        if query.count:
            if query.matches_nothing:
                return 0
            return await self._task_repo.count(query.conditions)
        if query.matches_nothing:
            return []
        return await self._task_repo.find(query)

    async def get_task(self, task_id: str, select: str | None = None) -> dict[str, Any]:
        """Return one task document (optionally projected). 404 if missing or malformed id."""
        projection = self._translator.parse_select(select)
        if not is_valid_id(task_id):
            raise ResourceNotFoundException("task", task_id)
        doc = await self._task_repo.get_document(task_id, projection)
        if doc is None:
            raise ResourceNotFoundException("task", task_id)
        return doc

    async def _load_assignee(self, user_id: str) -> UserEntity | None:
        """Return the referenced user, None for unassigned; 404 if it does not exist."""
        if not user_id:
            return None
        if not is_valid_id(user_id):
            raise ResourceNotFoundException("user", user_id)
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundException("user", user_id)
        return user

    async def create_task(self, body: TaskWrite) -> TaskEntity:
        _require_fields(body)
        assignee = await self._load_assignee(body.assigned_user or UNASSIGNED)
        if assignee is None:
            assigned_user, assigned_name = UNASSIGNED, UNASSIGNED_NAME
        else:
            assigned_user = assignee.id
            assigned_name = body.assigned_user_name or assignee.name
        task = TaskEntity(
            id=generate_cuid(),
            name=body.name,
            description=body.description or "",
            deadline=ensure_utc(body.deadline),
            completed=bool(body.completed),
            assigned_user=assigned_user,
            assigned_user_name=assigned_name,
            date_created=utc_now(),
        )
        journal = SyncJournal(f"create task {task.id}")
        with journal.guard():
            created = await self._task_repo.create(task)
            journal.record(f"inserted task {created.id}")
            await self._sync.sync_task(
                created.id, AssignmentState(), AssignmentState.of(created), journal
            )
        logger.info("Task created: %s (assigned to %r)", created.id, created.assigned_user)
        return created

    async def replace_task(self, task_id: str, body: TaskWrite) -> TaskEntity:
        """Full replace. Absent completed/assignedUser reset to false/unassigned."""
        if not is_valid_id(task_id):
            raise ResourceNotFoundException("task", task_id)
        existing = await self._task_repo.get_by_id(task_id)
        if existing is None:
            raise ResourceNotFoundException("task", task_id)
        _require_fields(body)
        assignee = await self._load_assignee(body.assigned_user or UNASSIGNED)

        if assignee is None:
            assigned_user, assigned_name = UNASSIGNED, UNASSIGNED_NAME
        elif body.assigned_user_name:
            assigned_user, assigned_name = assignee.id, body.assigned_user_name
        elif assignee.id == existing.assigned_user:
            assigned_user, assigned_name = assignee.id, existing.assigned_user_name
        else:
            assigned_user, assigned_name = assignee.id, assignee.name

        updated = TaskEntity(
            id=existing.id,
            name=body.name,
            description=body.description or "",
            deadline=ensure_utc(body.deadline),
            completed=bool(body.completed),
            assigned_user=assigned_user,
            assigned_user_name=assigned_name,
            date_created=existing.date_created,
        )
        journal = SyncJournal(f"replace task {task_id}")
        with journal.guard():
            await self._sync.sync_task(
                task_id, AssignmentState.of(existing), AssignmentState.of(updated), journal
            )
            saved = await self._task_repo.replace(updated)
        if saved is None:
            # Deleted between read and write.
            logger.error("Task %s vanished during replace; applied: %s", task_id, journal.steps)
            raise ResourceNotFoundException("task", task_id)
        logger.info("Task replaced: %s", task_id)
        return saved

    async def delete_task(self, task_id: str) -> TaskEntity:
        """Delete and return the task; pull it from its assignee when pending."""
        if not is_valid_id(task_id):
            raise ResourceNotFoundException("task", task_id)
        deleted = await self._task_repo.delete(task_id)
        if deleted is None:
            raise ResourceNotFoundException("task", task_id)
        journal = SyncJournal(f"delete task {task_id}", [f"deleted task {task_id}"])
        with journal.guard():
            await self._sync.sync_task(
                task_id, AssignmentState.of(deleted), AssignmentState(), journal
            )
        logger.info("Task deleted: %s", task_id)
        return deleted
