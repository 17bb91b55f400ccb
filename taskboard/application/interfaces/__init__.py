"""Repository ports for the application layer."""

from taskboard.application.interfaces.repositories import (
    ITaskRepository,
    IUserRepository,
)

__all__ = ["ITaskRepository", "IUserRepository"]
