"""Best-effort activity trail.

The logger is always called after the mutation it describes has committed.
A failure to append the row is logged and swallowed: it never turns a
successful mutation into an error response.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from seodesk.core.types import ActivityAction, ActivityLog, EntityType
    from seodesk.storage.entity_store import EntityStore

logger = logging.getLogger(__name__)


class ActivityLogger:
    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def record(
        self,
        user_id: int,
        action: ActivityAction,
        entity_type: EntityType,
        entity_id: int,
        details: str | None = None,
    ) -> ActivityLog | None:
        """Append one activity row; return it, or ``None`` if the write failed."""
        try:
            entry = await self.store.create_activity_log(
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                details=details,
            )
        except Exception:
            logger.exception(
                "Failed to record activity user=%d action=%s %s=%d",
                user_id, action.value, entity_type.value, entity_id,
            )
            return None
        logger.debug(
            "Recorded activity user=%d action=%s %s=%d",
            user_id, action.value, entity_type.value, entity_id,
        )
        return entry


__all__ = ["ActivityLogger"]
