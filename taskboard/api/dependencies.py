"""Presentation-layer dependency injection (composition root).

The document store is created once by the lifespan (or passed to
create_app in tests) and kept on app.state; repositories and services are
built per request from it. Routes depend only on these functions.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from taskboard.application.use_cases import TaskService, UserService
from taskboard.core.config import Settings, get_settings
from taskboard.infrastructure.repositories import TaskRepository, UserRepository
from taskboard.infrastructure.store.protocol import DocumentStore


def get_store(request: Request) -> DocumentStore:
    """Document store owned by the running app."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Document store is not initialised (lifespan not run?)")
    return store


def get_task_repo(
    store: Annotated[DocumentStore, Depends(get_store)],
) -> TaskRepository:
    return TaskRepository(store)


def get_user_repo(
    store: Annotated[DocumentStore, Depends(get_store)],
) -> UserRepository:
    return UserRepository(store)


def get_task_service(
    task_repo: Annotated[TaskRepository, Depends(get_task_repo)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TaskService:
    """Task service; list queries default to settings.task_default_limit."""
    return TaskService(task_repo, user_repo, default_limit=settings.task_default_limit)


def get_user_service(
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
    task_repo: Annotated[TaskRepository, Depends(get_task_repo)],
) -> UserService:
    """User service; list queries are unlimited unless the client sets limit."""
    return UserService(user_repo, task_repo)
