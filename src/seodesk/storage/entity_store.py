"""Abstract entity storage interface.

This module defines the repository interface for users, clients, projects,
tasks, reports, and activity logs, with an in-memory and a SQLAlchemy
implementation.

Contract shared by every entity type ``E``
------------------------------------------
- ``get_E(id)`` returns the entity or ``None``.
- ``list_Es()`` returns every row, newest ``created_at`` first (ties broken by
  descending id).  Administrative use only; request handlers use the
  owner-scoped variants.
- ``list_Es_by_owner(user_id)`` returns rows whose ``created_by`` is
  ``user_id``, newest first.
- ``create_E(data, created_by=...)`` assigns ``id`` and ``created_at``
  server-side.  Raises :class:`~seodesk.core.exceptions.InvalidDataError`
  when a foreign-key target does not exist.  The store never re-derives
  cross-entity *ownership*; callers check that beforehand.
- ``update_E(id, changes)`` merges ``changes`` into the row and returns the
  result, or ``None`` when ``id`` is unknown.  ``created_at`` is never touched.
- ``delete_E(id)`` returns ``True`` iff a row was removed.  Deletes never
  cascade: children of a removed row remain in place.

Activity logs are append-only: there is no update or delete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager
    from datetime import datetime

    from seodesk.core.types import (
        ActivityAction,
        ActivityLog,
        Client,
        ClientCreate,
        EntityType,
        Project,
        ProjectCreate,
        ProjectStatus,
        Report,
        ReportCreate,
        Task,
        TaskCreate,
        TaskStatus,
        User,
        UserCreate,
    )


class EntityStore(ABC):
    """Abstract base class for entity storage implementations.

    Implementations:
    - SQLAlchemyEntityStore: persistent storage (PostgreSQL, SQLite, MySQL)
    - InMemoryEntityStore: testing and development

    Example:
        ```python
        store = SQLAlchemyEntityStore(database_url="sqlite+aiosqlite:///./seodesk.db")
        await store.initialize()

        client = await store.create_client(
            ClientCreate(name="Acme", contact_person="Ann", email="ann@acme.test"),
            created_by=user.id,
        )

        async with store.atomic():
            owner = await store.get_client(client.id)
            ...
            await store.create_project(payload, created_by=user.id)
        ```
    """

    async def initialize(self) -> None:  # noqa: B027
        """Prepare the backing storage (create tables …).  Idempotent."""

    async def close(self) -> None:  # noqa: B027
        """Release connections held by the store."""

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager[None]:
        """Return an async context manager grouping reads and writes into one unit.

        Ownership checks performed inside the unit cannot be invalidated by a
        concurrent writer before the unit's own write lands.  Nested calls join
        the outer unit.
        """

    # ── Users ────────────────────────────────────────────────────────────────

    @abstractmethod
    async def get_user(self, user_id: int) -> User | None: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> User | None: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    async def create_user(self, data: UserCreate) -> User:
        """Create a user.  ``data.password`` must already be hashed.

        Raises:
            ConflictError: If the username or email is taken
        """

    @abstractmethod
    async def update_user(self, user_id: int, changes: dict[str, Any]) -> User | None:
        """Merge *changes* into a user.

        Raises:
            ConflictError: If *changes* moves the email onto another user's
        """

    # ── Clients ──────────────────────────────────────────────────────────────

    @abstractmethod
    async def get_client(self, client_id: int) -> Client | None: ...

    @abstractmethod
    async def list_clients(self) -> list[Client]: ...

    @abstractmethod
    async def list_clients_by_owner(self, user_id: int) -> list[Client]: ...

    @abstractmethod
    async def create_client(self, data: ClientCreate, *, created_by: int) -> Client: ...

    @abstractmethod
    async def update_client(self, client_id: int, changes: dict[str, Any]) -> Client | None: ...

    @abstractmethod
    async def delete_client(self, client_id: int) -> bool: ...

    # ── Projects ─────────────────────────────────────────────────────────────

    @abstractmethod
    async def get_project(self, project_id: int) -> Project | None: ...

    @abstractmethod
    async def list_projects(self) -> list[Project]: ...

    @abstractmethod
    async def list_projects_by_owner(self, user_id: int) -> list[Project]: ...

    @abstractmethod
    async def list_projects_by_client(self, client_id: int) -> list[Project]: ...

    @abstractmethod
    async def create_project(self, data: ProjectCreate, *, created_by: int) -> Project:
        """Create a project.

        Raises:
            InvalidDataError: If ``data.client_id`` does not reference a client
        """

    @abstractmethod
    async def update_project(
        self, project_id: int, changes: dict[str, Any]
    ) -> Project | None: ...

    @abstractmethod
    async def delete_project(self, project_id: int) -> bool: ...

    # ── Tasks ────────────────────────────────────────────────────────────────

    @abstractmethod
    async def get_task(self, task_id: int) -> Task | None: ...

    @abstractmethod
    async def list_tasks(self) -> list[Task]: ...

    @abstractmethod
    async def list_tasks_by_owner(self, user_id: int) -> list[Task]: ...

    @abstractmethod
    async def list_tasks_by_project(self, project_id: int) -> list[Task]: ...

    @abstractmethod
    async def list_tasks_by_status(self, status: TaskStatus) -> list[Task]: ...

    @abstractmethod
    async def list_upcoming_tasks(self, start: datetime, end: datetime) -> list[Task]:
        """Return pending tasks with ``start <= due_date <= end``, earliest due first."""

    @abstractmethod
    async def create_task(self, data: TaskCreate, *, created_by: int) -> Task:
        """Create a task.

        Raises:
            InvalidDataError: If ``data.project_id`` or ``data.assigned_to``
                does not reference an existing row
        """

    @abstractmethod
    async def update_task(self, task_id: int, changes: dict[str, Any]) -> Task | None: ...

    @abstractmethod
    async def delete_task(self, task_id: int) -> bool: ...

    # ── Reports ──────────────────────────────────────────────────────────────

    @abstractmethod
    async def get_report(self, report_id: int) -> Report | None: ...

    @abstractmethod
    async def list_reports(self) -> list[Report]: ...

    @abstractmethod
    async def list_reports_by_owner(self, user_id: int) -> list[Report]: ...

    @abstractmethod
    async def list_reports_by_project(self, project_id: int) -> list[Report]: ...

    @abstractmethod
    async def create_report(self, data: ReportCreate, *, created_by: int) -> Report:
        """Create a report, storing :meth:`ReportCreate.render_content`."""

    @abstractmethod
    async def update_report(self, report_id: int, changes: dict[str, Any]) -> Report | None: ...

    @abstractmethod
    async def delete_report(self, report_id: int) -> bool: ...

    # ── Activity logs ────────────────────────────────────────────────────────

    @abstractmethod
    async def create_activity_log(
        self,
        *,
        user_id: int,
        action: ActivityAction,
        entity_type: EntityType,
        entity_id: int,
        details: str | None = None,
    ) -> ActivityLog: ...

    @abstractmethod
    async def list_activity_logs(self, limit: int | None = None) -> list[ActivityLog]: ...

    @abstractmethod
    async def list_activity_logs_by_user(
        self, user_id: int, limit: int | None = None
    ) -> list[ActivityLog]: ...

    # ── Aggregates ───────────────────────────────────────────────────────────

    @abstractmethod
    async def count_projects(self, owner_id: int, status: ProjectStatus) -> int: ...

    @abstractmethod
    async def count_tasks(
        self,
        owner_id: int,
        status: TaskStatus,
        due_before: datetime | None = None,
    ) -> int:
        """Count tasks created by *owner_id* in *status*.

        When *due_before* is given only tasks with ``due_date < due_before``
        are counted (tasks without a due date never are).
        """

    @abstractmethod
    async def count_active_clients(self, owner_id: int) -> int:
        """Count distinct clients of *owner_id* with at least one in-progress project."""


__all__ = ["EntityStore"]
