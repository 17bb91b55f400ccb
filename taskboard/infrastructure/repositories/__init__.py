"""Document-store-backed repositories (one per collection)."""

from taskboard.infrastructure.repositories.task_repo import TaskRepository
from taskboard.infrastructure.repositories.user_repo import UserRepository

__all__ = [
    "TaskRepository",
    "UserRepository",
]
