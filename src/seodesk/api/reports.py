"""Report routes.  Reports are created and read; there is no update or delete."""
from __future__ import annotations

from fastapi import APIRouter, status

from seodesk.core.types import Report, ReportCreate
from seodesk.dependencies import CurrentUser, Manager

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("", response_model=list[Report])
async def list_reports(user: CurrentUser, manager: Manager):
    return await manager.reports.list_for_user(user.id)


@router.post("", response_model=Report, status_code=status.HTTP_201_CREATED)
async def generate_report(body: ReportCreate, user: CurrentUser, manager: Manager):
    """Create a report; empty ``content`` is rendered from the include flags."""
    return await manager.reports.create(user.id, body)


@router.get("/{report_id}", response_model=Report)
async def get_report(report_id: int, user: CurrentUser, manager: Manager):
    return await manager.reports.get(user.id, report_id)
