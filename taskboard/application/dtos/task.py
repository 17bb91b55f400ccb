"""DTOs for task use cases."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TaskWrite:
    """Body of a task create or full replace. Absent fields are None."""

    name: str | None = None
    deadline: datetime | None = None
    description: str | None = None
    completed: bool | None = None
    assigned_user: str | None = None
    assigned_user_name: str | None = None
