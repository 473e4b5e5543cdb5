"""API routers exposed by the portal."""

from fastapi import APIRouter

from . import (
    attendance,
    auth,
    bulk_import,
    consortiums,
    dashboard,
    health,
    invoices,
    leave,
    projects,
    tasks,
    templates,
    users,
)

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(projects.router)
api_router.include_router(tasks.router)
api_router.include_router(consortiums.router)
api_router.include_router(attendance.router)
api_router.include_router(invoices.router)
api_router.include_router(leave.router)
api_router.include_router(templates.router)
api_router.include_router(dashboard.router)
api_router.include_router(bulk_import.router)

health_router = health.router

__all__ = ["api_router", "health_router"]
