"""In-memory entity storage implementation for testing and development.

WARNING: This implementation stores data in memory only. All data is lost
when the process restarts. Use ONLY for testing and development.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import TYPE_CHECKING, Any, TypeVar

from seodesk.core.exceptions import ConflictError, InvalidDataError
from seodesk.core.types import (
    ActivityAction,
    ActivityLog,
    Client,
    Entity,
    EntityType,
    Project,
    ProjectStatus,
    Report,
    Task,
    TaskStatus,
    User,
)
from seodesk.storage.entity_store import EntityStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from seodesk.core.types import (
        ClientCreate,
        ProjectCreate,
        ReportCreate,
        TaskCreate,
        UserCreate,
    )

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)


def _newest_first(rows: Iterable[E]) -> list[E]:
    return sorted(rows, key=lambda r: (r.created_at, r.id), reverse=True)


class InMemoryEntityStore(EntityStore):
    """In-memory entity storage for testing and development.

    Rows live in one dictionary per entity type, keyed by id.  Ids come from
    a per-type counter starting at 1 and are never reused.

    :meth:`atomic` serialises units of work with an :class:`asyncio.Lock`.
    It does not roll back: callers perform every check before their single
    write, so a failing unit leaves nothing behind.

    DO NOT USE IN PRODUCTION - all data is lost on restart!

    Example:
        ```python
        store = InMemoryEntityStore()
        user = await store.create_user(UserCreate(...))
        clients = await store.list_clients_by_owner(user.id)
        store.clear()
        ```
    """

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._clients: dict[int, Client] = {}
        self._projects: dict[int, Project] = {}
        self._tasks: dict[int, Task] = {}
        self._reports: dict[int, Report] = {}
        self._activity_logs: dict[int, ActivityLog] = {}
        self._counters: dict[str, itertools.count[int]] = {}
        self._lock = asyncio.Lock()
        self._in_atomic: ContextVar[bool] = ContextVar(
            f"memory_store_atomic_{id(self)}", default=False
        )
        logger.info("Initialized in-memory entity store")

    def _next_id(self, kind: str) -> int:
        counter = self._counters.setdefault(kind, itertools.count(1))
        return next(counter)

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        if self._in_atomic.get():
            yield
            return
        async with self._lock:
            token = self._in_atomic.set(True)
            try:
                yield
            finally:
                self._in_atomic.reset(token)

    def clear(self) -> None:
        """Drop every row (for testing)."""
        for table in (
            self._users,
            self._clients,
            self._projects,
            self._tasks,
            self._reports,
            self._activity_logs,
        ):
            table.clear()
        self._counters.clear()
        logger.info("Cleared in-memory entity store")

    @staticmethod
    def _merge(table: dict[int, E], row_id: int, changes: dict[str, Any]) -> E | None:
        current = table.get(row_id)
        if current is None:
            return None
        # Re-validate so enum and datetime coercion matches create().
        merged = type(current).model_validate(
            {**current.model_dump(), **changes, "id": current.id, "created_at": current.created_at}
        )
        table[row_id] = merged
        return merged

    # ── Users ────────────────────────────────────────────────────────────────

    async def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    async def get_user_by_email(self, email: str) -> User | None:
        return next((u for u in self._users.values() if u.email == email), None)

    async def create_user(self, data: UserCreate) -> User:
        if await self.get_user_by_username(data.username) is not None:
            raise ConflictError("username", data.username)
        if await self.get_user_by_email(data.email) is not None:
            raise ConflictError("email", data.email)
        user = User(id=self._next_id("user"), **data.model_dump())
        self._users[user.id] = user
        logger.info("Created user id=%d username=%s", user.id, user.username)
        return user

    async def update_user(self, user_id: int, changes: dict[str, Any]) -> User | None:
        email = changes.get("email")
        if email is not None:
            other = await self.get_user_by_email(email)
            if other is not None and other.id != user_id:
                raise ConflictError("email", email)
        return self._merge(self._users, user_id, changes)

    # ── Clients ──────────────────────────────────────────────────────────────

    async def get_client(self, client_id: int) -> Client | None:
        return self._clients.get(client_id)

    async def list_clients(self) -> list[Client]:
        return _newest_first(self._clients.values())

    async def list_clients_by_owner(self, user_id: int) -> list[Client]:
        return _newest_first(c for c in self._clients.values() if c.created_by == user_id)

    async def create_client(self, data: ClientCreate, *, created_by: int) -> Client:
        client = Client(id=self._next_id("client"), created_by=created_by, **data.model_dump())
        self._clients[client.id] = client
        logger.info("Created client id=%d owner=%d", client.id, created_by)
        return client

    async def update_client(self, client_id: int, changes: dict[str, Any]) -> Client | None:
        return self._merge(self._clients, client_id, changes)

    async def delete_client(self, client_id: int) -> bool:
        return self._clients.pop(client_id, None) is not None

    # ── Projects ─────────────────────────────────────────────────────────────

    def _require_client(self, client_id: int) -> None:
        if client_id not in self._clients:
            raise InvalidDataError(
                "Invalid project data",
                errors=[{"field": "clientId", "message": f"client {client_id} does not exist"}],
            )

    async def get_project(self, project_id: int) -> Project | None:
        return self._projects.get(project_id)

    async def list_projects(self) -> list[Project]:
        return _newest_first(self._projects.values())

    async def list_projects_by_owner(self, user_id: int) -> list[Project]:
        return _newest_first(p for p in self._projects.values() if p.created_by == user_id)

    async def list_projects_by_client(self, client_id: int) -> list[Project]:
        return _newest_first(p for p in self._projects.values() if p.client_id == client_id)

    async def create_project(self, data: ProjectCreate, *, created_by: int) -> Project:
        self._require_client(data.client_id)
        project = Project(
            id=self._next_id("project"), created_by=created_by, **data.model_dump()
        )
        self._projects[project.id] = project
        logger.info("Created project id=%d client=%d", project.id, project.client_id)
        return project

    async def update_project(self, project_id: int, changes: dict[str, Any]) -> Project | None:
        if changes.get("client_id") is not None:
            self._require_client(changes["client_id"])
        return self._merge(self._projects, project_id, changes)

    async def delete_project(self, project_id: int) -> bool:
        return self._projects.pop(project_id, None) is not None

    # ── Tasks ────────────────────────────────────────────────────────────────

    def _require_task_refs(self, project_id: int | None, assigned_to: int | None) -> None:
        errors: list[dict[str, Any]] = []
        if project_id is not None and project_id not in self._projects:
            errors.append(
                {"field": "projectId", "message": f"project {project_id} does not exist"}
            )
        if assigned_to is not None and assigned_to not in self._users:
            errors.append(
                {"field": "assignedTo", "message": f"user {assigned_to} does not exist"}
            )
        if errors:
            raise InvalidDataError("Invalid task data", errors=errors)

    async def get_task(self, task_id: int) -> Task | None:
        return self._tasks.get(task_id)

    async def list_tasks(self) -> list[Task]:
        return _newest_first(self._tasks.values())

    async def list_tasks_by_owner(self, user_id: int) -> list[Task]:
        return _newest_first(t for t in self._tasks.values() if t.created_by == user_id)

    async def list_tasks_by_project(self, project_id: int) -> list[Task]:
        return _newest_first(t for t in self._tasks.values() if t.project_id == project_id)

    async def list_tasks_by_status(self, status: TaskStatus) -> list[Task]:
        return _newest_first(t for t in self._tasks.values() if t.status == status)

    async def list_upcoming_tasks(self, start: datetime, end: datetime) -> list[Task]:
        due = [
            t
            for t in self._tasks.values()
            if t.status == TaskStatus.PENDING
            and t.due_date is not None
            and start <= t.due_date <= end
        ]
        return sorted(due, key=lambda t: (t.due_date, t.id))

    async def create_task(self, data: TaskCreate, *, created_by: int) -> Task:
        self._require_task_refs(data.project_id, data.assigned_to)
        task = Task(id=self._next_id("task"), created_by=created_by, **data.model_dump())
        self._tasks[task.id] = task
        logger.info("Created task id=%d project=%d", task.id, task.project_id)
        return task

    async def update_task(self, task_id: int, changes: dict[str, Any]) -> Task | None:
        self._require_task_refs(changes.get("project_id"), changes.get("assigned_to"))
        return self._merge(self._tasks, task_id, changes)

    async def delete_task(self, task_id: int) -> bool:
        return self._tasks.pop(task_id, None) is not None

    # ── Reports ──────────────────────────────────────────────────────────────

    def _require_project(self, project_id: int) -> None:
        if project_id not in self._projects:
            raise InvalidDataError(
                "Invalid report data",
                errors=[{"field": "projectId", "message": f"project {project_id} does not exist"}],
            )

    async def get_report(self, report_id: int) -> Report | None:
        return self._reports.get(report_id)

    async def list_reports(self) -> list[Report]:
        return _newest_first(self._reports.values())

    async def list_reports_by_owner(self, user_id: int) -> list[Report]:
        return _newest_first(r for r in self._reports.values() if r.created_by == user_id)

    async def list_reports_by_project(self, project_id: int) -> list[Report]:
        return _newest_first(r for r in self._reports.values() if r.project_id == project_id)

    async def create_report(self, data: ReportCreate, *, created_by: int) -> Report:
        self._require_project(data.project_id)
        report = Report(
            id=self._next_id("report"),
            title=data.title,
            project_id=data.project_id,
            content=data.render_content(),
            created_by=created_by,
        )
        self._reports[report.id] = report
        logger.info("Created report id=%d project=%d", report.id, report.project_id)
        return report

    async def update_report(self, report_id: int, changes: dict[str, Any]) -> Report | None:
        if changes.get("project_id") is not None:
            self._require_project(changes["project_id"])
        return self._merge(self._reports, report_id, changes)

    async def delete_report(self, report_id: int) -> bool:
        return self._reports.pop(report_id, None) is not None

    # ── Activity logs ────────────────────────────────────────────────────────

    async def create_activity_log(
        self,
        *,
        user_id: int,
        action: ActivityAction,
        entity_type: EntityType,
        entity_id: int,
        details: str | None = None,
    ) -> ActivityLog:
        entry = ActivityLog(
            id=self._next_id("activity_log"),
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        )
        self._activity_logs[entry.id] = entry
        return entry

    async def list_activity_logs(self, limit: int | None = None) -> list[ActivityLog]:
        return _newest_first(self._activity_logs.values())[:limit]

    async def list_activity_logs_by_user(
        self, user_id: int, limit: int | None = None
    ) -> list[ActivityLog]:
        rows = _newest_first(a for a in self._activity_logs.values() if a.user_id == user_id)
        return rows[:limit]

    # ── Aggregates ───────────────────────────────────────────────────────────

    async def count_projects(self, owner_id: int, status: ProjectStatus) -> int:
        return sum(
            1 for p in self._projects.values() if p.created_by == owner_id and p.status == status
        )

    async def count_tasks(
        self,
        owner_id: int,
        status: TaskStatus,
        due_before: datetime | None = None,
    ) -> int:
        return sum(
            1
            for t in self._tasks.values()
            if t.created_by == owner_id
            and t.status == status
            and (due_before is None or (t.due_date is not None and t.due_date < due_before))
        )

    async def count_active_clients(self, owner_id: int) -> int:
        active = {
            p.client_id
            for p in self._projects.values()
            if p.status == ProjectStatus.IN_PROGRESS
        }
        return sum(
            1 for c in self._clients.values() if c.created_by == owner_id and c.id in active
        )


__all__ = ["InMemoryEntityStore"]
