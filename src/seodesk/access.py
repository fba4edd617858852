"""Ownership-based access control.

Every check runs in the same order:

1. no acting user                       → :class:`UnauthenticatedError`
2. target (or its parent) does not exist → :class:`EntityNotFoundError`
3. owner differs from the acting user    → :class:`ForbiddenError`

Clients and Projects are gated by their own ``created_by``.  Tasks and
Reports are gated by the ``created_by`` of their parent Project, which may
differ from the child's own ``created_by``.

The ``check_*_target`` helpers validate the parent a payload points at before
a create or update; there a missing parent is reported as Forbidden, like an
unowned one, so the caller cannot probe for foreign ids.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from seodesk.core.exceptions import (
    EntityNotFoundError,
    ForbiddenError,
    UnauthenticatedError,
)
from seodesk.core.types import EntityType

if TYPE_CHECKING:
    from seodesk.core.types import Client, Project, Report, Task
    from seodesk.storage.entity_store import EntityStore

logger = logging.getLogger(__name__)

INVALID_CLIENT = "Invalid client or permission denied"
INVALID_PROJECT = "Invalid project or permission denied"


class AccessControl:
    """Resolve entities for an acting user, enforcing ownership.

    Example:
        ```python
        access = AccessControl(store)
        async with store.atomic():
            project = await access.require_project(user.id, project_id)
            await access.check_client_target(user.id, payload.client_id)
            await store.update_project(project.id, changes)
        ```
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    @staticmethod
    def _authenticated(user_id: int | None) -> int:
        if user_id is None:
            raise UnauthenticatedError()
        return user_id

    @staticmethod
    def _deny(user_id: int, entity_type: EntityType, entity_id: int) -> ForbiddenError:
        logger.warning(
            "Access denied: user=%d %s=%d", user_id, entity_type.value, entity_id
        )
        return ForbiddenError()

    async def effective_owner(self, entity: Task | Report) -> int | None:
        """Return the owner that gates *entity*: its parent Project's creator.

        ``None`` when the parent Project no longer exists.
        """
        project = await self.store.get_project(entity.project_id)
        return None if project is None else project.created_by

    async def require_client(self, user_id: int | None, client_id: int) -> Client:
        uid = self._authenticated(user_id)
        client = await self.store.get_client(client_id)
        if client is None:
            raise EntityNotFoundError(EntityType.CLIENT, client_id)
        if client.created_by != uid:
            raise self._deny(uid, EntityType.CLIENT, client_id)
        return client

    async def require_project(self, user_id: int | None, project_id: int) -> Project:
        uid = self._authenticated(user_id)
        project = await self.store.get_project(project_id)
        if project is None:
            raise EntityNotFoundError(EntityType.PROJECT, project_id)
        if project.created_by != uid:
            raise self._deny(uid, EntityType.PROJECT, project_id)
        return project

    async def require_task(self, user_id: int | None, task_id: int) -> Task:
        uid = self._authenticated(user_id)
        task = await self.store.get_task(task_id)
        if task is None:
            raise EntityNotFoundError(EntityType.TASK, task_id)
        owner = await self.effective_owner(task)
        if owner is None:
            raise EntityNotFoundError(EntityType.PROJECT, task.project_id)
        if owner != uid:
            raise self._deny(uid, EntityType.TASK, task_id)
        return task

    async def require_report(self, user_id: int | None, report_id: int) -> Report:
        uid = self._authenticated(user_id)
        report = await self.store.get_report(report_id)
        if report is None:
            raise EntityNotFoundError(EntityType.REPORT, report_id)
        owner = await self.effective_owner(report)
        if owner is None:
            raise EntityNotFoundError(EntityType.PROJECT, report.project_id)
        if owner != uid:
            raise self._deny(uid, EntityType.REPORT, report_id)
        return report

    async def check_client_target(self, user_id: int | None, client_id: int) -> Client:
        uid = self._authenticated(user_id)
        client = await self.store.get_client(client_id)
        if client is None or client.created_by != uid:
            logger.warning("Rejected client target: user=%d client=%d", uid, client_id)
            raise ForbiddenError(INVALID_CLIENT)
        return client

    async def check_project_target(self, user_id: int | None, project_id: int) -> Project:
        uid = self._authenticated(user_id)
        project = await self.store.get_project(project_id)
        if project is None or project.created_by != uid:
            logger.warning("Rejected project target: user=%d project=%d", uid, project_id)
            raise ForbiddenError(INVALID_PROJECT)
        return project

    async def owned_project_ids(self, user_id: int | None) -> set[int]:
        """Ids of every Project created by *user_id*."""
        uid = self._authenticated(user_id)
        return {p.id for p in await self.store.list_projects_by_owner(uid)}


__all__ = ["INVALID_CLIENT", "INVALID_PROJECT", "AccessControl"]
