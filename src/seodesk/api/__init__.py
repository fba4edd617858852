"""HTTP routers for seodesk."""

from fastapi import APIRouter

from seodesk.api import auth, clients, dashboard, projects, reports, tasks

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(clients.router)
api_router.include_router(projects.router)
api_router.include_router(tasks.router)
api_router.include_router(reports.router)
api_router.include_router(dashboard.router)

__all__ = ["api_router"]
