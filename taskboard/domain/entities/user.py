"""User domain entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taskboard.domain.exceptions import ValidationException
from taskboard.domain.schema import ID_FIELD


@dataclass
class UserEntity:
    """Domain entity for a user.

    pending_tasks holds ids of tasks assigned to this user and not completed.
    Order is kept as stored; duplicates are never written.
    """

    id: str
    name: str
    email: str
    date_created: datetime
    pending_tasks: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate user business rules. Raises ValidationException if invalid."""
        if not self.name or not self.name.strip():
            raise ValidationException("User name is required", fields=["name"])
        if not self.email or not self.email.strip():
            raise ValidationException("User email is required", fields=["email"])

    def to_document(self) -> dict[str, Any]:
        """Return the stored/wire representation (including _id)."""
        return {
            ID_FIELD: self.id,
            "name": self.name,
            "email": self.email,
            "pendingTasks": list(self.pending_tasks),
            "dateCreated": self.date_created,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> UserEntity:
        return cls(
            id=doc[ID_FIELD],
            name=doc.get("name", ""),
            email=doc.get("email", ""),
            pending_tasks=list(doc.get("pendingTasks") or []),
            date_created=doc["dateCreated"],
        )
