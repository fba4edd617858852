"""Dashboard snapshot, activity feed and health check."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from seodesk.core.types import ActivityLog, DashboardSnapshot
from seodesk.dependencies import CurrentUser, Manager

router = APIRouter(tags=["dashboard"])


@router.get("/api/dashboard/stats", response_model=DashboardSnapshot)
async def dashboard_stats(user: CurrentUser, manager: Manager):
    return await manager.dashboard.compute(user.id)


@router.get("/api/activities", response_model=list[ActivityLog])
async def list_activities(
    user: CurrentUser,
    manager: Manager,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    """The caller's activity trail, newest first."""
    return await manager.store.list_activity_logs_by_user(user.id, limit=limit)


@router.get("/health")
async def health(manager: Manager):
    report = await manager.health_check()
    if report["status"] != "healthy":
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=report)
    return report
