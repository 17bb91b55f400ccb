"""Domain entities (business logic separate from persistence)."""

from taskboard.domain.entities.task import UNASSIGNED, UNASSIGNED_NAME, TaskEntity
from taskboard.domain.entities.user import UserEntity

__all__ = [
    "TaskEntity",
    "UNASSIGNED",
    "UNASSIGNED_NAME",
    "UserEntity",
]
