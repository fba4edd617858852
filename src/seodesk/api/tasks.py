"""Task routes."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from seodesk.core.types import Task, TaskCreate, TaskUpdate
from seodesk.dependencies import CurrentUser, Manager

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=list[Task])
async def list_tasks(user: CurrentUser, manager: Manager):
    return await manager.tasks.list_for_user(user.id)


# Declared before /{task_id} so "upcoming" is not parsed as an id.
@router.get("/upcoming", response_model=list[Task])
async def upcoming_tasks(
    user: CurrentUser,
    manager: Manager,
    days: Annotated[int | None, Query(ge=0, le=365)] = None,
):
    """Pending tasks under the caller's projects due within ``days`` from now."""
    window = days if days is not None else manager.config.upcoming_days_default
    return await manager.tasks.upcoming(user.id, window)


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate, user: CurrentUser, manager: Manager):
    return await manager.tasks.create(user.id, body)


@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: int, user: CurrentUser, manager: Manager):
    return await manager.tasks.get(user.id, task_id)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    user: CurrentUser,
    manager: Manager,
):
    return await manager.tasks.update(user.id, task_id, body)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: int, user: CurrentUser, manager: Manager):
    await manager.tasks.delete(user.id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
