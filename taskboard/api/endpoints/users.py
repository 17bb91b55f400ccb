"""User API: thin routes delegating to UserService."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query

from taskboard.api.dependencies import get_user_service
from taskboard.application.use_cases import UserService
from taskboard.schemas.envelope import Envelope
from taskboard.schemas.user import UserRequest

router = APIRouter()

UserBody = Annotated[UserRequest | None, Body()]


@router.get("", response_model=Envelope)
async def list_users(
    user_svc: Annotated[UserService, Depends(get_user_service)],
    where: Annotated[str | None, Query(description="JSON filter")] = None,
    sort: Annotated[str | None, Query(description="JSON {field: 1|-1}")] = None,
    select: Annotated[str | None, Query(description="JSON {field: 1|0}")] = None,
    skip: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    count: Annotated[str | None, Query(description='"true" returns the match count')] = None,
):
    """List users (unlimited by default) or count them."""
    data = await user_svc.list_users(
        where=where, sort=sort, select=select, skip=skip, limit=limit, count=count
    )
    return Envelope(message="OK", data=data)


@router.post("", response_model=Envelope, status_code=201)
async def create_user(
    user_svc: Annotated[UserService, Depends(get_user_service)],
    body: UserBody = None,
):
    """Create a user; pendingTasks, if given, are claimed for the new user."""
    created = await user_svc.create_user((body or UserRequest()).to_write())
    return Envelope(message="New user created successfully.", data=created.to_document())


@router.get("/{user_id}", response_model=Envelope)
async def get_user(
    user_id: str,
    user_svc: Annotated[UserService, Depends(get_user_service)],
    select: Annotated[str | None, Query(description="JSON {field: 1|0}")] = None,
):
    return Envelope(message="OK", data=await user_svc.get_user(user_id, select))


@router.put("/{user_id}", response_model=Envelope)
async def replace_user(
    user_id: str,
    user_svc: Annotated[UserService, Depends(get_user_service)],
    body: UserBody = None,
):
    """Replace a user; a pendingTasks list reassigns the named tasks."""
    saved = await user_svc.replace_user(user_id, (body or UserRequest()).to_write())
    return Envelope(message="User updated successfully.", data=saved.to_document())


@router.delete("/{user_id}", response_model=Envelope)
async def delete_user(
    user_id: str,
    user_svc: Annotated[UserService, Depends(get_user_service)],
):
    """Delete a user and unassign all of its tasks."""
    deleted = await user_svc.delete_user(user_id)
    return Envelope(message="User deleted successfully.", data=deleted.to_document())
