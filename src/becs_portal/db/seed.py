"""Seed script for populating development data."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Consortium, ProjectType, TaskPriority, User, UserRole, today
from ..repositories import ProjectRepository
from ..schemas import ProjectCreate, TaskCreate, UserCreate
from ..services import ProjectService, TaskService, UserService
from .session import get_session_maker, init_db

logger = logging.getLogger(__name__)

SEED_PASSWORD = "portal-demo"

SEED_USERS = (
    UserCreate(
        email="admin@example.com",
        password=SEED_PASSWORD,
        first_name="Ada",
        last_name="Admin",
        staff_id="BECS-001",
        role=UserRole.ADMIN,
        department="Operations",
        position="Systems Administrator",
    ),
    UserCreate(
        email="director@example.com",
        password=SEED_PASSWORD,
        first_name="Dana",
        last_name="Director",
        staff_id="BECS-002",
        role=UserRole.DIRECTOR,
        department="Consulting",
        position="Managing Director",
    ),
    UserCreate(
        email="staff@example.com",
        password=SEED_PASSWORD,
        first_name="Sam",
        last_name="Staff",
        staff_id="BECS-003",
        role=UserRole.STAFF,
        department="Consulting",
        position="Analyst",
    ),
)


async def _ensure_user(service: UserService, payload: UserCreate) -> User:
    user = await service.get_user_by_email(payload.email)
    if user is None:
        user = await service.create_user(payload)
    return user


async def seed_data(session: AsyncSession) -> None:
    """Create the demo accounts, projects and tasks unless they already exist."""
    user_service = UserService(session)
    admin, director, staff = [await _ensure_user(user_service, payload) for payload in SEED_USERS]

    projects = ProjectRepository(session)
    project_service = ProjectService(session)
    task_service = TaskService(session)
    due = today() + timedelta(days=7)

    if await projects.get_by_code("AHP-C1-001") is None:
        ahp = await project_service.create_project(
            admin,
            ProjectCreate(
                code="AHP-C1-001",
                name="Community Health Financing Review",
                type=ProjectType.AHP,
                consortium=Consortium.CONSORTIUM_1,
                client_name="Ministry of Health",
            ),
        )
        await task_service.create_task(
            admin,
            TaskCreate(
                title="Weekly progress report",
                project_id=ahp.id,
                assignee_id=staff.id,
                reviewer_id=director.id,
                priority=TaskPriority.MEDIUM,
                target_completion_date=due,
                is_weekly_deliverable=True,
            ),
        )
        await task_service.create_task(
            admin,
            TaskCreate(
                title="Draft financing assessment",
                project_id=ahp.id,
                assignee_id=staff.id,
                reviewer_id=director.id,
                priority=TaskPriority.HIGH,
                target_completion_date=due,
            ),
        )

    if await projects.get_by_code("PRV-001") is None:
        private = await project_service.create_project(
            admin,
            ProjectCreate(
                code="PRV-001",
                name="Retail Market Study",
                type=ProjectType.PRIVATE,
                client_name="Acme Retail",
            ),
        )
        await task_service.create_task(
            admin,
            TaskCreate(
                title="Collect baseline survey data",
                project_id=private.id,
                assignee_id=staff.id,
                reviewer_id=admin.id,
                priority=TaskPriority.LOW,
            ),
        )

    logger.info("Seed data ensured")


async def seed() -> None:
    """Populate the database with a small set of development fixtures."""
    await init_db()
    async with get_session_maker()() as session:
        await seed_data(session)


def main() -> None:
    """Entry-point hook for ``python -m`` execution."""
    asyncio.run(seed())


if __name__ == "__main__":  # pragma: no cover - manual execution entry-point
    main()
