"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities and query AST only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from taskboard.domain.entities import TaskEntity, UserEntity
from taskboard.domain.query import Condition, Projection, StoreQuery


class ITaskRepository(Protocol):
    """Protocol for task repository (DIP)."""

    async def find(self, query: StoreQuery) -> list[dict[str, Any]]:
        """Return task documents for a translated query."""

    async def count(self, conditions: Sequence[Condition]) -> int:
        """Return number of tasks matching conditions."""

    async def get_document(
        self, task_id: str, projection: Projection | None = None
    ) -> dict[str, Any] | None:
        """Return a projected task document or None."""

    async def get_by_id(self, task_id: str) -> TaskEntity | None:
        """Return task by ID."""

    async def get_many(self, task_ids: Sequence[str]) -> list[TaskEntity]:
        """Return the existing tasks among task_ids."""

    async def create(self, task: TaskEntity) -> TaskEntity:
        """Insert a task."""

    async def replace(self, task: TaskEntity) -> TaskEntity | None:
        """Overwrite a task; None if missing."""

    async def delete(self, task_id: str) -> TaskEntity | None:
        """Delete a task; return it, or None if missing."""

    async def unassign(self, task_ids: Sequence[str], user_id: str) -> int:
        """Unassign the given tasks still assigned to user_id."""

    async def unassign_all(self, user_id: str) -> int:
        """Unassign every task assigned to user_id."""

    async def claim(self, task_ids: Sequence[str], user_id: str, user_name: str) -> int:
        """Assign tasks to user_id and clear their completed flag."""

    async def rename_assignee(self, user_id: str, user_name: str) -> int:
        """Refresh assignedUserName on tasks assigned to user_id."""


class IUserRepository(Protocol):
    """Protocol for user repository (DIP)."""

    async def find(self, query: StoreQuery) -> list[dict[str, Any]]:
        """Return user documents for a translated query."""

    async def count(self, conditions: Sequence[Condition]) -> int:
        """Return number of users matching conditions."""

    async def get_document(
        self, user_id: str, projection: Projection | None = None
    ) -> dict[str, Any] | None:
        """Return a projected user document or None."""

    async def get_by_id(self, user_id: str) -> UserEntity | None:
        """Return user by ID."""

    async def get_by_email(self, email: str) -> UserEntity | None:
        """Return the user with this email."""

    async def create(self, user: UserEntity) -> UserEntity:
        """Insert a user; DuplicateEmailException on email clash."""

    async def replace(self, user: UserEntity) -> UserEntity | None:
        """Overwrite a user; DuplicateEmailException on email clash."""

    async def delete(self, user_id: str) -> UserEntity | None:
        """Delete a user; return it, or None if missing."""

    async def add_pending(self, user_id: str, task_id: str) -> bool:
        """Add a task id to pendingTasks."""

    async def remove_pending(self, user_id: str, task_id: str) -> bool:
        """Remove a task id from pendingTasks."""
