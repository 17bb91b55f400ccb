"""Task repository over a DocumentStore (implements ITaskRepository)."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from taskboard.domain.entities import UNASSIGNED, UNASSIGNED_NAME, TaskEntity
from taskboard.domain.query import Condition, Projection, StoreQuery, eq, one_of
from taskboard.domain.schema import ID_FIELD
from taskboard.infrastructure.collections import COLLECTION_TASKS
from taskboard.infrastructure.store.protocol import DocumentStore

# Firestore caps IN filters at 30 values; keep batches within that everywhere.
ID_BATCH_SIZE = 30


def _batches(ids: Sequence[str]) -> Iterator[list[str]]:
    for start in range(0, len(ids), ID_BATCH_SIZE):
        yield list(ids[start:start + ID_BATCH_SIZE])


class TaskRepository:
    """Task persistence. Reads return raw documents or TaskEntity."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def find(self, query: StoreQuery) -> list[dict[str, Any]]:
        """Return task documents for a translated query."""
        return await self._store.find(COLLECTION_TASKS, query)

    async def count(self, conditions: Sequence[Condition]) -> int:
        return await self._store.count(COLLECTION_TASKS, conditions)

    async def get_document(
        self, task_id: str, projection: Projection | None = None
    ) -> dict[str, Any] | None:
        """Return the (optionally projected) task document, or None."""
        return await self._store.get(COLLECTION_TASKS, task_id, projection)

    async def get_by_id(self, task_id: str) -> TaskEntity | None:
        doc = await self._store.get(COLLECTION_TASKS, task_id)
        return TaskEntity.from_document(doc) if doc else None

    async def get_many(self, task_ids: Sequence[str]) -> list[TaskEntity]:
        """Return the tasks that exist among task_ids (any order)."""
        found: list[TaskEntity] = []
        for batch in _batches(task_ids):
            docs = await self._store.find(
                COLLECTION_TASKS, StoreQuery(conditions=(one_of(ID_FIELD, batch),))
            )
            found.extend(TaskEntity.from_document(d) for d in docs)
        return found

    async def create(self, task: TaskEntity) -> TaskEntity:
        doc = await self._store.insert(COLLECTION_TASKS, task.to_document())
        return TaskEntity.from_document(doc)

    async def replace(self, task: TaskEntity) -> TaskEntity | None:
        doc = await self._store.replace(COLLECTION_TASKS, task.id, task.to_document())
        return TaskEntity.from_document(doc) if doc else None

    async def delete(self, task_id: str) -> TaskEntity | None:
        doc = await self._store.delete(COLLECTION_TASKS, task_id)
        return TaskEntity.from_document(doc) if doc else None

    async def unassign(self, task_ids: Sequence[str], user_id: str) -> int:
        """Reset the given tasks to unassigned, but only those still assigned to user_id."""
        total = 0
        for batch in _batches(task_ids):
            total += await self._store.update_many(
                COLLECTION_TASKS,
                (one_of(ID_FIELD, batch), eq("assignedUser", user_id)),
                {"assignedUser": UNASSIGNED, "assignedUserName": UNASSIGNED_NAME},
            )
        return total

    async def unassign_all(self, user_id: str) -> int:
        """Reset every task assigned to user_id, completed or not."""
        return await self._store.update_many(
            COLLECTION_TASKS,
            (eq("assignedUser", user_id),),
            {"assignedUser": UNASSIGNED, "assignedUserName": UNASSIGNED_NAME},
        )

    async def claim(self, task_ids: Sequence[str], user_id: str, user_name: str) -> int:
        """Assign tasks to user_id and mark them not completed."""
        total = 0
        for batch in _batches(task_ids):
            total += await self._store.update_many(
                COLLECTION_TASKS,
                (one_of(ID_FIELD, batch),),
                {
                    "assignedUser": user_id,
                    "assignedUserName": user_name,
                    "completed": False,
                },
            )
        return total

    async def rename_assignee(self, user_id: str, user_name: str) -> int:
        """Refresh the display name on every task assigned to user_id."""
        return await self._store.update_many(
            COLLECTION_TASKS,
            (eq("assignedUser", user_id),),
            {"assignedUserName": user_name},
        )
