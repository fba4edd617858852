"""DashboardAggregator tests."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

from factories import client_payload, project_payload, task_payload
import pytest

from seodesk.core.types import (
    ActivityAction,
    EntityType,
    ProjectStatus,
    Task,
    TaskStatus,
)
from seodesk.dashboard import DashboardAggregator, _deadline_key, percentage

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


class TestPercentage:

    @pytest.mark.parametrize(
        ("count", "total", "expected"),
        [
            (1, 8, 13),
            (1, 3, 33),
            (2, 3, 67),
            (1, 2, 50),
            (3, 8, 38),
            (5, 8, 63),
            (8, 8, 100),
            (0, 8, 0),
            (0, 0, 0),
            (3, 0, 0),
        ],
    )
    def test_half_up(self, count: int, total: int, expected: int) -> None:
        assert percentage(count, total) == expected


class TestDeadlineOrder:

    def test_undated_last(self) -> None:
        undated = Task(id=1, title="Undated", project_id=1, created_by=1)
        late = Task(
            id=2, title="Late", project_id=1, created_by=1, due_date=NOW + timedelta(days=2)
        )
        early = Task(id=3, title="Early", project_id=1, created_by=1, due_date=NOW)
        ordered = sorted([undated, late, early], key=_deadline_key)
        assert [t.id for t in ordered] == [3, 2, 1]

    def test_ties_by_id(self) -> None:
        a = Task(id=5, title="A", project_id=1, created_by=1, due_date=NOW)
        b = Task(id=4, title="B", project_id=1, created_by=1, due_date=NOW)
        assert [t.id for t in sorted([a, b], key=_deadline_key)] == [4, 5]


class TestEmptySnapshot:

    @pytest.mark.asyncio
    async def test_no_projects_short_circuits(self) -> None:
        store = MagicMock()
        store.list_projects_by_owner = AsyncMock(return_value=[])
        store.count_projects = AsyncMock(return_value=0)
        store.count_tasks = AsyncMock(return_value=0)
        store.list_activity_logs_by_user = AsyncMock(return_value=[])

        snapshot = await DashboardAggregator(store).compute(1, now=NOW)

        assert snapshot.stats.active_projects == 0
        assert snapshot.task_progress.total == 0
        assert snapshot.recent_activities == []
        store.count_projects.assert_not_awaited()
        store.count_tasks.assert_not_awaited()
        store.list_activity_logs_by_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_clients_without_projects_still_empty(self, store, owner) -> None:
        await store.create_client(client_payload(), created_by=owner.id)
        snapshot = await DashboardAggregator(store).compute(owner.id, now=NOW)
        assert snapshot.recent_clients == []
        assert snapshot.stats.active_clients == 0


class TestCompute:

    @pytest.fixture
    async def project(self, store, owner):
        client = await store.create_client(client_payload(), created_by=owner.id)
        return await store.create_project(project_payload(client.id), created_by=owner.id)

    @pytest.mark.asyncio
    async def test_stats_and_progress(self, store, owner, project) -> None:
        await store.create_project(
            project_payload(project.client_id, "Done", status=ProjectStatus.COMPLETED),
            created_by=owner.id,
        )
        await store.create_task(
            task_payload(project.id, status=TaskStatus.COMPLETED), created_by=owner.id
        )
        for _ in range(2):
            await store.create_task(
                task_payload(project.id, status=TaskStatus.IN_PROGRESS), created_by=owner.id
            )
        await store.create_task(
            task_payload(project.id, due_date=NOW - timedelta(days=1)), created_by=owner.id
        )
        for _ in range(4):
            await store.create_task(task_payload(project.id), created_by=owner.id)

        snapshot = await DashboardAggregator(store).compute(owner.id, now=NOW)

        assert snapshot.stats.active_projects == 1
        assert snapshot.stats.completed_projects == 1
        assert snapshot.stats.pending_tasks == 5
        assert snapshot.stats.active_clients == 1
        progress = snapshot.task_progress
        assert (progress.completed, progress.in_progress, progress.pending) == (1, 2, 5)
        assert progress.total == 8
        assert progress.overdue == 1
        assert progress.completed_percentage == 13
        assert progress.in_progress_percentage == 25
        assert progress.pending_percentage == 63
        assert progress.overdue_percentage == 13

    @pytest.mark.asyncio
    async def test_upcoming_deadlines(self, store, owner, stranger, project) -> None:
        due = [
            await store.create_task(
                task_payload(project.id, f"T{n}", due_date=NOW + timedelta(hours=7 - n)),
                created_by=owner.id,
            )
            for n in range(7)
        ]
        await store.create_task(
            task_payload(project.id, "Far", due_date=NOW + timedelta(days=8)),
            created_by=owner.id,
        )
        other_client = await store.create_client(client_payload("Other"), created_by=stranger.id)
        other = await store.create_project(
            project_payload(other_client.id), created_by=stranger.id
        )
        await store.create_task(
            task_payload(other.id, "Theirs", due_date=NOW + timedelta(minutes=5)),
            created_by=stranger.id,
        )

        snapshot = await DashboardAggregator(store).compute(owner.id, now=NOW)

        expected = [t.id for t in sorted(due, key=lambda t: t.due_date)][:5]
        assert [t.id for t in snapshot.upcoming_deadlines] == expected

    @pytest.mark.asyncio
    async def test_window_configurable(self, store, owner, project) -> None:
        await store.create_task(
            task_payload(project.id, due_date=NOW + timedelta(days=10)), created_by=owner.id
        )
        narrow = await DashboardAggregator(store).compute(owner.id, now=NOW)
        wide = await DashboardAggregator(store, deadline_window_days=14).compute(owner.id, now=NOW)
        assert narrow.upcoming_deadlines == []
        assert len(wide.upcoming_deadlines) == 1

    @pytest.mark.asyncio
    async def test_recent_lists_capped(self, store, owner, project) -> None:
        for n in range(5):
            await store.create_client(client_payload(f"Extra {n}"), created_by=owner.id)
        for n in range(7):
            await store.create_activity_log(
                user_id=owner.id,
                action=ActivityAction.UPDATED,
                entity_type=EntityType.PROJECT,
                entity_id=project.id,
                details=f"edit {n}",
            )

        snapshot = await DashboardAggregator(store).compute(owner.id, now=NOW)

        assert [c.name for c in snapshot.recent_clients] == [
            "Extra 4", "Extra 3", "Extra 2", "Extra 1"
        ]
        assert [a.details for a in snapshot.recent_activities] == [
            "edit 6", "edit 5", "edit 4", "edit 3", "edit 2"
        ]

    @pytest.mark.asyncio
    async def test_other_users_activity_excluded(self, store, owner, stranger, project) -> None:
        await store.create_activity_log(
            user_id=stranger.id,
            action=ActivityAction.LOGGED_IN,
            entity_type=EntityType.USER,
            entity_id=stranger.id,
        )
        snapshot = await DashboardAggregator(store).compute(owner.id, now=NOW)
        assert snapshot.recent_activities == []
