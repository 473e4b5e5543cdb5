from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from becs_portal.models import Project, ProjectType, Task, TaskStatus, User
from becs_portal.services import DashboardService
from becs_portal.services.dashboard import week_bounds

pytestmark = pytest.mark.asyncio

WEDNESDAY = date(2024, 3, 27)


def test_week_bounds_run_monday_to_sunday() -> None:
    assert week_bounds(WEDNESDAY) == (date(2024, 3, 25), date(2024, 3, 31))
    assert week_bounds(date(2024, 3, 25)) == (date(2024, 3, 25), date(2024, 3, 31))
    assert week_bounds(date(2024, 3, 31)) == (date(2024, 3, 25), date(2024, 3, 31))


async def _seed(session: AsyncSession, staff: User, director: User) -> None:
    ahp = Project(code="AHP-1", name="AHP One", type=ProjectType.AHP, consortium="consortium_1")
    loose = Project(code="AHP-2", name="AHP Two", type=ProjectType.AHP)
    private = Project(code="PRV-1", name="Private One", type=ProjectType.PRIVATE)
    session.add_all([ahp, loose, private])
    await session.flush()

    def completed_at(day: int) -> datetime:
        return datetime(2024, 3, day, 10, tzinfo=timezone.utc)

    session.add_all(
        [
            Task(
                title="Weekly report",
                project_id=ahp.id,
                assignee_id=staff.id,
                status=TaskStatus.COMPLETED,
                is_weekly_deliverable=True,
                completed_at=completed_at(26),
            ),
            Task(
                title="Last week's report",
                project_id=ahp.id,
                assignee_id=staff.id,
                status=TaskStatus.COMPLETED,
                is_weekly_deliverable=True,
                completed_at=completed_at(20),
            ),
            Task(
                title="Open weekly",
                project_id=ahp.id,
                assignee_id=staff.id,
                reviewer_id=director.id,
                status=TaskStatus.SUBMITTED,
                is_weekly_deliverable=True,
            ),
            Task(
                title="Late memo",
                project_id=private.id,
                assignee_id=director.id,
                status=TaskStatus.IN_PROGRESS,
                target_completion_date=date(2024, 3, 1),
            ),
        ]
    )
    await session.commit()


async def test_organisation_wide_stats_for_privileged_users(
    session: AsyncSession, admin: User, director: User, staff: User
) -> None:
    await _seed(session, staff, director)

    stats = await DashboardService(session).stats(director, on=WEDNESDAY)

    assert stats.scope == "organisation"
    assert stats.staff.active_users == 3
    assert stats.staff.departments == 1
    assert stats.projects.total == 3
    assert stats.projects.by_type == {"AHP": 2, "Private": 1}
    assert stats.projects.ahp_by_consortium["consortium_1"] == 1
    assert stats.projects.ahp_by_consortium["unassigned"] == 1
    assert stats.tasks.total == 4
    assert stats.tasks.by_status["completed"] == 2
    assert stats.tasks.by_status["overdue"] == 1
    assert stats.tasks.by_status["in_progress"] == 0
    assert stats.tasks.overdue == 1
    assert stats.tasks.pending_reviews == 1
    assert stats.weekly_deliverables.total == 3
    assert stats.weekly_deliverables.incomplete == 1
    assert stats.weekly_deliverables.completed_this_week == 1
    progress = {item.code: item for item in stats.project_progress}
    assert progress["AHP-1"].task_count == 3
    assert progress["AHP-1"].completion_percentage == pytest.approx(66.67)
    assert progress["AHP-2"].completion_percentage == 0.0


async def test_staff_figures_cover_their_own_tasks(
    session: AsyncSession, admin: User, director: User, staff: User
) -> None:
    await _seed(session, staff, director)

    stats = await DashboardService(session).stats(staff, on=WEDNESDAY)

    assert stats.scope == "own"
    assert stats.tasks.total == 3
    assert stats.tasks.overdue == 0
    assert stats.projects.total == 3
