"""Entity schemas: the fields each collection stores and their types.

Query parameters are validated against these before translation, so
arbitrary client structures never reach the store.
"""

from __future__ import annotations

from dataclasses import dataclass

from taskboard.domain.enums import FieldType

ID_FIELD = "_id"
ID_ALIASES = frozenset({"_id", "id"})


@dataclass(frozen=True)
class EntitySchema:
    """Named set of fields with their types."""

    name: str
    fields: dict[str, FieldType]

    def resolve(self, name: str) -> str | None:
        """Return the canonical field name, or None if unknown. 'id' maps to '_id'."""
        if name in ID_ALIASES:
            return ID_FIELD
        if name in self.fields:
            return name
        return None

    def field_type(self, name: str) -> FieldType:
        return self.fields[name]


TASK_SCHEMA = EntitySchema(
    name="task",
    fields={
        ID_FIELD: FieldType.ID,
        "name": FieldType.STRING,
        "description": FieldType.STRING,
        "deadline": FieldType.DATETIME,
        "completed": FieldType.BOOLEAN,
        "assignedUser": FieldType.STRING,
        "assignedUserName": FieldType.STRING,
        "dateCreated": FieldType.DATETIME,
    },
)

USER_SCHEMA = EntitySchema(
    name="user",
    fields={
        ID_FIELD: FieldType.ID,
        "name": FieldType.STRING,
        "email": FieldType.STRING,
        "pendingTasks": FieldType.ID_LIST,
        "dateCreated": FieldType.DATETIME,
    },
)
