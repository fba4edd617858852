"""Per-user dashboard aggregation.

A snapshot for user U contains:

- ``stats``: active / completed Projects owned by U, pending Tasks created by
  U, and the number of U's Clients with at least one in-progress Project.
- ``taskProgress``: Tasks created by U per status, plus ``overdue`` (pending
  with a due date in the past).  ``total`` is completed + in progress +
  pending; ``overdue`` is a subset of pending and is not added to it.  Each
  percentage is ``round(100 * count / total)`` with halves rounded up,
  computed independently, so the partition need not sum to exactly 100.
- ``recentActivities``: U's newest activity rows.
- ``recentClients``: U's newest Clients.
- ``upcomingDeadlines``: pending Tasks under U's Projects due within the
  deadline window, earliest first, undated last.

A user without Projects gets the empty snapshot straight away.
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from seodesk.core.types import (
    DashboardSnapshot,
    DashboardStats,
    ProjectStatus,
    TaskProgress,
    TaskStatus,
    as_utc,
)

if TYPE_CHECKING:
    from seodesk.core.types import Task
    from seodesk.storage.entity_store import EntityStore

logger = logging.getLogger(__name__)


def percentage(count: int, total: int) -> int:
    """Return ``100 * count / total`` rounded half-up, or 0 when *total* is 0.

    >>> percentage(1, 8)
    13
    >>> percentage(1, 3)
    33
    >>> percentage(0, 0)
    0
    """
    if total <= 0:
        return 0
    return (200 * count + total) // (2 * total)


def _deadline_key(task: Task) -> tuple[int, datetime, int]:
    if task.due_date is None:
        return (1, datetime.max.replace(tzinfo=UTC), task.id)
    return (0, task.due_date, task.id)


class DashboardAggregator:
    """Compute :class:`DashboardSnapshot` values from an :class:`EntityStore`."""

    def __init__(
        self,
        store: EntityStore,
        *,
        deadline_window_days: int = 7,
        recent_activity_limit: int = 5,
        recent_clients_limit: int = 4,
        upcoming_deadlines_limit: int = 5,
    ) -> None:
        self.store = store
        self.deadline_window = timedelta(days=deadline_window_days)
        self.recent_activity_limit = recent_activity_limit
        self.recent_clients_limit = recent_clients_limit
        self.upcoming_deadlines_limit = upcoming_deadlines_limit

    async def compute(self, user_id: int, now: datetime | None = None) -> DashboardSnapshot:
        now = as_utc(now) or datetime.now(UTC)

        projects = await self.store.list_projects_by_owner(user_id)
        if not projects:
            logger.debug("Dashboard for user=%d: no projects, empty snapshot", user_id)
            return DashboardSnapshot()

        stats = DashboardStats(
            active_projects=await self.store.count_projects(user_id, ProjectStatus.IN_PROGRESS),
            completed_projects=await self.store.count_projects(user_id, ProjectStatus.COMPLETED),
            pending_tasks=await self.store.count_tasks(user_id, TaskStatus.PENDING),
            active_clients=await self.store.count_active_clients(user_id),
        )
        progress = await self.task_progress(user_id, now)

        activities = await self.store.list_activity_logs_by_user(
            user_id, limit=self.recent_activity_limit
        )
        clients = await self.store.list_clients_by_owner(user_id)

        project_ids = {p.id for p in projects}
        upcoming = await self.store.list_upcoming_tasks(now, now + self.deadline_window)
        deadlines = sorted(
            (t for t in upcoming if t.project_id in project_ids), key=_deadline_key
        )

        logger.debug(
            "Dashboard for user=%d: %d projects, %d tasks, %d deadlines",
            user_id, len(projects), progress.total, len(deadlines),
        )
        return DashboardSnapshot(
            stats=stats,
            task_progress=progress,
            recent_activities=activities,
            recent_clients=clients[: self.recent_clients_limit],
            upcoming_deadlines=deadlines[: self.upcoming_deadlines_limit],
        )

    async def task_progress(self, user_id: int, now: datetime) -> TaskProgress:
        completed = await self.store.count_tasks(user_id, TaskStatus.COMPLETED)
        in_progress = await self.store.count_tasks(user_id, TaskStatus.IN_PROGRESS)
        pending = await self.store.count_tasks(user_id, TaskStatus.PENDING)
        overdue = await self.store.count_tasks(user_id, TaskStatus.PENDING, due_before=now)
        total = completed + in_progress + pending
        return TaskProgress(
            completed=completed,
            in_progress=in_progress,
            pending=pending,
            overdue=overdue,
            total=total,
            completed_percentage=percentage(completed, total),
            in_progress_percentage=percentage(in_progress, total),
            pending_percentage=percentage(pending, total),
            overdue_percentage=percentage(overdue, total),
        )


__all__ = ["DashboardAggregator", "percentage"]
