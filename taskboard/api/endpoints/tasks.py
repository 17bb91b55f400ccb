"""Task API: thin routes delegating to TaskService."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query

from taskboard.api.dependencies import get_task_service
from taskboard.application.use_cases import TaskService
from taskboard.schemas.envelope import Envelope
from taskboard.schemas.task import TaskRequest

router = APIRouter()

TaskBody = Annotated[TaskRequest | None, Body()]


@router.get("", response_model=Envelope)
async def list_tasks(
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    where: Annotated[str | None, Query(description="JSON filter")] = None,
    sort: Annotated[str | None, Query(description="JSON {field: 1|-1}")] = None,
    select: Annotated[str | None, Query(description="JSON {field: 1|0}")] = None,
    skip: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    count: Annotated[str | None, Query(description='"true" returns the match count')] = None,
):
    """List tasks (default limit 100) or count them."""
    data = await task_svc.list_tasks(
        where=where, sort=sort, select=select, skip=skip, limit=limit, count=count
    )
    return Envelope(message="OK", data=data)


@router.post("", response_model=Envelope, status_code=201)
async def create_task(
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    body: TaskBody = None,
):
    created = await task_svc.create_task((body or TaskRequest()).to_write())
    return Envelope(message="New task created successfully.", data=created.to_document())


@router.get("/{task_id}", response_model=Envelope)
async def get_task(
    task_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    select: Annotated[str | None, Query(description="JSON {field: 1|0}")] = None,
):
    """Get one task; 404 for unknown or malformed ids."""
    return Envelope(message="OK", data=await task_svc.get_task(task_id, select))


@router.put("/{task_id}", response_model=Envelope)
async def replace_task(
    task_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
    body: TaskBody = None,
):
    """Replace a task; the assignee's pendingTasks follow the new state."""
    saved = await task_svc.replace_task(task_id, (body or TaskRequest()).to_write())
    return Envelope(message="Task updated successfully.", data=saved.to_document())


@router.delete("/{task_id}", response_model=Envelope)
async def delete_task(
    task_id: str,
    task_svc: Annotated[TaskService, Depends(get_task_service)],
):
    deleted = await task_svc.delete_task(task_id)
    return Envelope(message="Task deleted successfully.", data=deleted.to_document())
