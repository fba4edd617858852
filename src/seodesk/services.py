"""Entity services: authorize, write, then record.

Every mutating operation follows the same shape::

    async with store.atomic():
        existing = await access.require_<entity>(user_id, id)   # 401 / 404 / 403
        await access.check_<parent>_target(user_id, parent_id)  # 403
        result = await store.<write>(...)
    await activity.record(...)                                   # best effort

so ownership checks and the write land in one unit, and nothing is written
when a check fails.  Activity is recorded only after the unit has committed.
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from seodesk.core.exceptions import EntityNotFoundError
from seodesk.core.types import ActivityAction, EntityType, as_utc

if TYPE_CHECKING:
    from seodesk.access import AccessControl
    from seodesk.activity import ActivityLogger
    from seodesk.core.types import (
        Client,
        ClientCreate,
        ClientUpdate,
        Project,
        ProjectCreate,
        ProjectUpdate,
        Report,
        ReportCreate,
        Task,
        TaskCreate,
        TaskUpdate,
    )
    from seodesk.storage.entity_store import EntityStore

logger = logging.getLogger(__name__)


class EntityService:
    """Shared wiring for the per-entity services."""

    entity_type: EntityType

    def __init__(
        self,
        store: EntityStore,
        access: AccessControl,
        activity: ActivityLogger,
    ) -> None:
        self.store = store
        self.access = access
        self.activity = activity

    async def _record(
        self, user_id: int, action: ActivityAction, entity_id: int, details: str
    ) -> None:
        await self.activity.record(user_id, action, self.entity_type, entity_id, details)

    def _gone(self, entity_id: int) -> EntityNotFoundError:
        return EntityNotFoundError(self.entity_type, entity_id)


class ClientService(EntityService):
    entity_type = EntityType.CLIENT

    async def list_for_user(self, user_id: int) -> list[Client]:
        return await self.store.list_clients_by_owner(user_id)

    async def get(self, user_id: int, client_id: int) -> Client:
        return await self.access.require_client(user_id, client_id)

    async def create(self, user_id: int, data: ClientCreate) -> Client:
        async with self.store.atomic():
            client = await self.store.create_client(data, created_by=user_id)
        await self._record(
            user_id, ActivityAction.CREATED, client.id, f"Created client: {client.name}"
        )
        return client

    async def update(self, user_id: int, client_id: int, data: ClientUpdate) -> Client:
        async with self.store.atomic():
            existing = await self.access.require_client(user_id, client_id)
            updated = await self.store.update_client(client_id, data.changes())
            if updated is None:
                raise self._gone(client_id)
        logger.info("Updated client id=%d by user=%d", client_id, user_id)
        await self._record(
            user_id, ActivityAction.UPDATED, client_id, f"Updated client: {existing.name}"
        )
        return updated

    async def delete(self, user_id: int, client_id: int) -> None:
        async with self.store.atomic():
            existing = await self.access.require_client(user_id, client_id)
            if not await self.store.delete_client(client_id):
                raise self._gone(client_id)
        logger.info("Deleted client id=%d by user=%d", client_id, user_id)
        await self._record(
            user_id, ActivityAction.DELETED, client_id, f"Deleted client: {existing.name}"
        )


class ProjectService(EntityService):
    entity_type = EntityType.PROJECT

    async def list_for_user(self, user_id: int) -> list[Project]:
        return await self.store.list_projects_by_owner(user_id)

    async def list_by_client(self, user_id: int, client_id: int) -> list[Project]:
        await self.access.require_client(user_id, client_id)
        return await self.store.list_projects_by_client(client_id)

    async def get(self, user_id: int, project_id: int) -> Project:
        return await self.access.require_project(user_id, project_id)

    async def create(self, user_id: int, data: ProjectCreate) -> Project:
        async with self.store.atomic():
            await self.access.check_client_target(user_id, data.client_id)
            project = await self.store.create_project(data, created_by=user_id)
        await self._record(
            user_id, ActivityAction.CREATED, project.id, f"Created project: {project.name}"
        )
        return project

    async def update(self, user_id: int, project_id: int, data: ProjectUpdate) -> Project:
        changes = data.changes()
        async with self.store.atomic():
            existing = await self.access.require_project(user_id, project_id)
            if "client_id" in changes:
                await self.access.check_client_target(user_id, changes["client_id"])
            updated = await self.store.update_project(project_id, changes)
            if updated is None:
                raise self._gone(project_id)
        logger.info("Updated project id=%d by user=%d", project_id, user_id)
        await self._record(
            user_id, ActivityAction.UPDATED, project_id, f"Updated project: {existing.name}"
        )
        return updated

    async def delete(self, user_id: int, project_id: int) -> None:
        async with self.store.atomic():
            existing = await self.access.require_project(user_id, project_id)
            if not await self.store.delete_project(project_id):
                raise self._gone(project_id)
        logger.info("Deleted project id=%d by user=%d", project_id, user_id)
        await self._record(
            user_id, ActivityAction.DELETED, project_id, f"Deleted project: {existing.name}"
        )


class TaskService(EntityService):
    entity_type = EntityType.TASK

    async def list_for_user(self, user_id: int) -> list[Task]:
        return await self.store.list_tasks_by_owner(user_id)

    async def list_by_project(self, user_id: int, project_id: int) -> list[Task]:
        await self.access.require_project(user_id, project_id)
        return await self.store.list_tasks_by_project(project_id)

    async def upcoming(
        self, user_id: int, days: int, now: datetime | None = None
    ) -> list[Task]:
        """Pending tasks under the user's projects due within *days* from *now*."""
        start = as_utc(now) or datetime.now(UTC)
        tasks = await self.store.list_upcoming_tasks(start, start + timedelta(days=days))
        project_ids = await self.access.owned_project_ids(user_id)
        return [t for t in tasks if t.project_id in project_ids]

    async def get(self, user_id: int, task_id: int) -> Task:
        return await self.access.require_task(user_id, task_id)

    async def create(self, user_id: int, data: TaskCreate) -> Task:
        async with self.store.atomic():
            await self.access.check_project_target(user_id, data.project_id)
            task = await self.store.create_task(data, created_by=user_id)
        await self._record(
            user_id, ActivityAction.CREATED, task.id, f"Created task: {task.title}"
        )
        return task

    async def update(self, user_id: int, task_id: int, data: TaskUpdate) -> Task:
        changes = data.changes()
        async with self.store.atomic():
            existing = await self.access.require_task(user_id, task_id)
            if "project_id" in changes:
                await self.access.check_project_target(user_id, changes["project_id"])
            updated = await self.store.update_task(task_id, changes)
            if updated is None:
                raise self._gone(task_id)
        logger.info("Updated task id=%d by user=%d", task_id, user_id)
        await self._record(
            user_id, ActivityAction.UPDATED, task_id, f"Updated task: {existing.title}"
        )
        return updated

    async def delete(self, user_id: int, task_id: int) -> None:
        async with self.store.atomic():
            existing = await self.access.require_task(user_id, task_id)
            if not await self.store.delete_task(task_id):
                raise self._gone(task_id)
        logger.info("Deleted task id=%d by user=%d", task_id, user_id)
        await self._record(
            user_id, ActivityAction.DELETED, task_id, f"Deleted task: {existing.title}"
        )


class ReportService(EntityService):
    entity_type = EntityType.REPORT

    async def list_for_user(self, user_id: int) -> list[Report]:
        """Every report whose parent project the user owns."""
        project_ids = await self.access.owned_project_ids(user_id)
        return [r for r in await self.store.list_reports() if r.project_id in project_ids]

    async def list_by_project(self, user_id: int, project_id: int) -> list[Report]:
        await self.access.require_project(user_id, project_id)
        return await self.store.list_reports_by_project(project_id)

    async def get(self, user_id: int, report_id: int) -> Report:
        return await self.access.require_report(user_id, report_id)

    async def create(self, user_id: int, data: ReportCreate) -> Report:
        async with self.store.atomic():
            await self.access.check_project_target(user_id, data.project_id)
            report = await self.store.create_report(data, created_by=user_id)
        await self._record(
            user_id, ActivityAction.CREATED, report.id, f"Generated report: {report.title}"
        )
        return report


__all__ = [
    "ClientService",
    "EntityService",
    "ProjectService",
    "ReportService",
    "TaskService",
]
