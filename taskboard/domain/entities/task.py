"""Task domain entity.

Represents a unit of work that may be assigned to a user, independent of
persistence. Documents use the camelCase wire field names.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from taskboard.domain.exceptions import ValidationException
from taskboard.domain.schema import ID_FIELD

UNASSIGNED = ""
UNASSIGNED_NAME = "unassigned"


@dataclass
class TaskEntity:
    """Domain entity for a task.

    assigned_user is a user id or "" when unassigned; assigned_user_name is a
    display copy of the assignee's name and is not authoritative.
    """

    id: str
    name: str
    deadline: datetime
    date_created: datetime
    description: str = ""
    completed: bool = False
    assigned_user: str = UNASSIGNED
    assigned_user_name: str = UNASSIGNED_NAME

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate task business rules. Raises ValidationException if invalid."""
        if not self.name or not self.name.strip():
            raise ValidationException("Task name is required", fields=["name"])

    @property
    def is_pending(self) -> bool:
        """True when the task is assigned and not completed."""
        return bool(self.assigned_user) and not self.completed

    def to_document(self) -> dict[str, Any]:
        """Return the stored/wire representation (including _id)."""
        return {
            ID_FIELD: self.id,
            "name": self.name,
            "description": self.description,
            "deadline": self.deadline,
            "completed": self.completed,
            "assignedUser": self.assigned_user,
            "assignedUserName": self.assigned_user_name,
            "dateCreated": self.date_created,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> TaskEntity:
        return cls(
            id=doc[ID_FIELD],
            name=doc.get("name", ""),
            description=doc.get("description") or "",
            deadline=doc["deadline"],
            completed=bool(doc.get("completed", False)),
            assigned_user=doc.get("assignedUser") or UNASSIGNED,
            assigned_user_name=doc.get("assignedUserName") or UNASSIGNED_NAME,
            date_created=doc["dateCreated"],
        )
