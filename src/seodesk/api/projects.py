"""Project routes, plus the tasks and reports listed under a project."""
from __future__ import annotations

from fastapi import APIRouter, Response, status

from seodesk.core.types import Project, ProjectCreate, ProjectUpdate, Report, Task
from seodesk.dependencies import CurrentUser, Manager

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("", response_model=list[Project])
async def list_projects(user: CurrentUser, manager: Manager):
    return await manager.projects.list_for_user(user.id)


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(body: ProjectCreate, user: CurrentUser, manager: Manager):
    """Create a project under one of the caller's clients."""
    return await manager.projects.create(user.id, body)


@router.get("/{project_id}", response_model=Project)
async def get_project(project_id: int, user: CurrentUser, manager: Manager):
    return await manager.projects.get(user.id, project_id)


@router.put("/{project_id}", response_model=Project)
async def update_project(
    project_id: int,
    body: ProjectUpdate,
    user: CurrentUser,
    manager: Manager,
):
    return await manager.projects.update(user.id, project_id, body)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: int, user: CurrentUser, manager: Manager):
    await manager.projects.delete(user.id, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/tasks", response_model=list[Task], tags=["tasks"])
async def list_project_tasks(project_id: int, user: CurrentUser, manager: Manager):
    return await manager.tasks.list_by_project(user.id, project_id)


@router.get("/{project_id}/reports", response_model=list[Report], tags=["reports"])
async def list_project_reports(project_id: int, user: CurrentUser, manager: Manager):
    return await manager.reports.list_by_project(user.id, project_id)
