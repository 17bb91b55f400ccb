"""DTOs for task and user use cases (no dependency on HTTP schemas)."""

from taskboard.application.dtos.task import TaskWrite
from taskboard.application.dtos.user import UserWrite

__all__ = ["TaskWrite", "UserWrite"]
