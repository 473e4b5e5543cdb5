"""Dashboard statistics schema."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class StaffStats(BaseModel):
    active_users: int
    departments: int


class ProjectStats(BaseModel):
    total: int
    by_type: dict[str, int]
    by_status: dict[str, int]
    ahp_by_consortium: dict[str, int]


class TaskStats(BaseModel):
    total: int
    by_status: dict[str, int] = Field(description="Counts keyed by effective status")
    overdue: int
    pending_reviews: int


class WeeklyDeliverableStats(BaseModel):
    week_start: date
    week_end: date
    total: int
    incomplete: int
    completed_this_week: int


class ProjectProgress(BaseModel):
    project_id: int
    code: str
    name: str
    task_count: int
    completed_task_count: int
    completion_percentage: float


class DashboardStats(BaseModel):
    """Read-only aggregate view; task figures are scoped to the caller."""

    scope: str
    staff: StaffStats
    projects: ProjectStats
    tasks: TaskStats
    weekly_deliverables: WeeklyDeliverableStats
    project_progress: list[ProjectProgress]


__all__ = [
    "DashboardStats",
    "ProjectProgress",
    "ProjectStats",
    "StaffStats",
    "TaskStats",
    "WeeklyDeliverableStats",
]
