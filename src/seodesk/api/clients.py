"""Client routes, plus the projects listed under a client."""
from __future__ import annotations

from fastapi import APIRouter, Response, status

from seodesk.core.types import Client, ClientCreate, ClientUpdate, Project
from seodesk.dependencies import CurrentUser, Manager

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=list[Client])
async def list_clients(user: CurrentUser, manager: Manager):
    """The caller's clients, newest first."""
    return await manager.clients.list_for_user(user.id)


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(body: ClientCreate, user: CurrentUser, manager: Manager):
    return await manager.clients.create(user.id, body)


@router.get("/{client_id}", response_model=Client)
async def get_client(client_id: int, user: CurrentUser, manager: Manager):
    return await manager.clients.get(user.id, client_id)


@router.put("/{client_id}", response_model=Client)
async def update_client(
    client_id: int,
    body: ClientUpdate,
    user: CurrentUser,
    manager: Manager,
):
    return await manager.clients.update(user.id, client_id, body)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: int, user: CurrentUser, manager: Manager):
    await manager.clients.delete(user.id, client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{client_id}/projects", response_model=list[Project], tags=["projects"])
async def list_client_projects(client_id: int, user: CurrentUser, manager: Manager):
    return await manager.projects.list_by_client(user.id, client_id)
