"""ActivityLogger: append after commit, swallow failures."""
from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from seodesk.activity import ActivityLogger
from seodesk.core.types import ActivityAction, EntityType


class TestRecord:

    @pytest.mark.asyncio
    async def test_appends_row(self, store, owner) -> None:
        activity = ActivityLogger(store)
        entry = await activity.record(
            owner.id, ActivityAction.CREATED, EntityType.CLIENT, 3, "Created client: Acme"
        )
        assert entry is not None
        assert entry.details == "Created client: Acme"
        logs = await store.list_activity_logs_by_user(owner.id)
        assert [(a.action, a.entity_type, a.entity_id) for a in logs] == [
            (ActivityAction.CREATED, EntityType.CLIENT, 3)
        ]

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self, caplog) -> None:
        store = MagicMock()
        store.create_activity_log = AsyncMock(side_effect=RuntimeError("disk full"))
        activity = ActivityLogger(store)

        with caplog.at_level(logging.ERROR, logger="seodesk.activity"):
            entry = await activity.record(
                1, ActivityAction.DELETED, EntityType.PROJECT, 2, "Deleted project: Audit"
            )

        assert entry is None
        store.create_activity_log.assert_awaited_once()
        assert "Failed to record activity" in caplog.text
