"""Use cases (application layer)."""

from taskboard.application.use_cases.tasks import TaskService
from taskboard.application.use_cases.users import UserService

__all__ = ["TaskService", "UserService"]
