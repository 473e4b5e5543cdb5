"""Dashboard statistics."""

from __future__ import annotations

from fastapi import APIRouter

from ...deps import CurrentUserDependency, DatabaseSessionDependency
from ...schemas import DashboardStats
from ...services import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats, summary="Portal statistics for the caller")
async def dashboard_stats(
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> DashboardStats:
    return await DashboardService(session).stats(current_user)
