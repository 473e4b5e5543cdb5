"""Repository for project persistence."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import case, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Consortium, Project, ProjectStatus, ProjectType, Task, TaskStatus
from .base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Concrete repository encapsulating ``Project`` persistence operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Project)

    async def get_by_code(self, code: str) -> Project | None:
        result = await self.session.execute(
            select(Project).where(func.upper(Project.code) == code.strip().upper())
        )
        return result.scalar_one_or_none()

    async def list_filtered(
        self,
        *,
        project_type: ProjectType | None = None,
        consortium: Consortium | None = None,
        status: ProjectStatus | None = None,
        include_archived: bool = False,
    ) -> list[Project]:
        query = select(Project)
        if project_type is not None:
            query = query.where(Project.type == project_type)
        if consortium is not None:
            query = query.where(Project.consortium == consortium)
        if status is not None:
            query = query.where(Project.status == status)
        if not include_archived:
            query = query.where(Project.is_archived.is_(False))
        result = await self.session.execute(query.order_by(Project.code))
        return list(result.scalars().all())

    async def list_for_consortium(self, consortium: Consortium) -> list[Project]:
        """Return live AHP projects belonging to ``consortium``."""
        return await self.list_filtered(project_type=ProjectType.AHP, consortium=consortium)

    async def task_counts(self, project_ids: Sequence[int]) -> dict[int, tuple[int, int]]:
        """Return ``{project_id: (total_tasks, completed_tasks)}``."""
        if not project_ids:
            return {}
        completed = func.sum(case((Task.status == TaskStatus.COMPLETED, 1), else_=0))
        result = await self.session.execute(
            select(Task.project_id, func.count(Task.id), completed)
            .where(Task.project_id.in_(list(project_ids)))
            .group_by(Task.project_id)
        )
        return {
            project_id: (int(total), int(done or 0))
            for project_id, total, done in result.all()
        }
