"""Read-only dashboard aggregation."""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta

from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import OVERDUE, Consortium, ProjectType, TaskStatus, User, today
from ..repositories import ProjectRepository, TaskFilters, TaskRepository, UserRepository
from ..schemas.dashboard import (
    DashboardStats,
    ProjectProgress,
    ProjectStats,
    StaffStats,
    TaskStats,
    WeeklyDeliverableStats,
)
from .projects import UNASSIGNED_BUCKET, ProjectService


def week_bounds(day: date) -> tuple[date, date]:
    """Return the Monday and Sunday of the week containing ``day``."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


class DashboardService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._users = UserRepository(session)
        self._projects = ProjectRepository(session)
        self._tasks = TaskRepository(session)
        self._project_service = ProjectService(session)

    async def stats(self, actor: User, *, on: date | None = None) -> DashboardStats:
        day = on or today()
        projects = await self._projects.list_filtered()
        by_consortium: Counter[str] = Counter({member.value: 0 for member in Consortium})
        by_consortium[UNASSIGNED_BUCKET] = 0
        for project in projects:
            if project.type is ProjectType.AHP:
                key = project.consortium.value if project.consortium is not None else UNASSIGNED_BUCKET
                by_consortium[key] += 1

        tasks = await self._tasks.list_all(
            TaskFilters(visible_to_user_id=None if actor.is_privileged else actor.id)
        )
        by_status: Counter[str] = Counter({member.value: 0 for member in TaskStatus})
        by_status[OVERDUE] = 0
        for task in tasks:
            by_status[task.effective_status(day)] += 1
        pending_reviews = sum(
            1 for task in tasks if task.status in (TaskStatus.SUBMITTED, TaskStatus.UNDER_REVIEW)
        )

        week_start, week_end = week_bounds(day)
        weekly = [task for task in tasks if task.is_weekly_deliverable]
        completed_this_week = 0
        for task in weekly:
            completed_on = task.completed_on() if task.status is TaskStatus.COMPLETED else None
            if completed_on is not None and week_start <= completed_on <= week_end:
                completed_this_week += 1

        progress = await self._project_service.progress_for(projects)

        return DashboardStats(
            scope="organisation" if actor.is_privileged else "own",
            staff=StaffStats(
                active_users=await self._users.count_active(),
                departments=len(await self._users.list_departments()),
            ),
            projects=ProjectStats(
                total=len(projects),
                by_type=dict(Counter(project.type.value for project in projects)),
                by_status=dict(Counter(project.status.value for project in projects)),
                ahp_by_consortium=dict(by_consortium),
            ),
            tasks=TaskStats(
                total=len(tasks),
                by_status=dict(by_status),
                overdue=by_status[OVERDUE],
                pending_reviews=pending_reviews,
            ),
            weekly_deliverables=WeeklyDeliverableStats(
                week_start=week_start,
                week_end=week_end,
                total=len(weekly),
                incomplete=sum(1 for task in weekly if task.status is not TaskStatus.COMPLETED),
                completed_this_week=completed_this_week,
            ),
            project_progress=[
                ProjectProgress(
                    project_id=project.id,
                    code=project.code,
                    name=project.name,
                    task_count=progress[project.id].total,
                    completed_task_count=progress[project.id].completed,
                    completion_percentage=progress[project.id].percentage,
                )
                for project in projects
            ],
        )


__all__ = ["DashboardService", "week_bounds"]
