"""Repository for interacting with task and review persistence models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Sequence

from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Review, Task, TaskPriority, TaskStatus
from .base import BaseRepository


@dataclass(slots=True)
class TaskFilters:
    """Criteria accepted by :meth:`TaskRepository.list_paginated`."""

    visible_to_user_id: int | None = None
    project_id: int | None = None
    project_ids: Sequence[int] | None = None
    assignee_id: int | None = None
    reviewer_id: int | None = None
    status: TaskStatus | None = None
    overdue_on: date | None = None
    priority: TaskPriority | None = None
    is_weekly_deliverable: bool | None = None


class TaskRepository(BaseRepository[Task]):
    """Concrete repository encapsulating ``Task`` persistence operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Task)

    @staticmethod
    def _conditions(filters: TaskFilters) -> list[Any]:
        conditions: list[Any] = []
        if filters.visible_to_user_id is not None:
            conditions.append(
                or_(
                    Task.assignee_id == filters.visible_to_user_id,
                    Task.reviewer_id == filters.visible_to_user_id,
                )
            )
        if filters.project_id is not None:
            conditions.append(Task.project_id == filters.project_id)
        if filters.project_ids is not None:
            conditions.append(Task.project_id.in_(list(filters.project_ids)))
        if filters.assignee_id is not None:
            conditions.append(Task.assignee_id == filters.assignee_id)
        if filters.reviewer_id is not None:
            conditions.append(Task.reviewer_id == filters.reviewer_id)
        if filters.status is not None:
            conditions.append(Task.status == filters.status)
        if filters.overdue_on is not None:
            conditions.append(Task.target_completion_date.is_not(None))
            conditions.append(Task.target_completion_date < filters.overdue_on)
            conditions.append(Task.status != TaskStatus.COMPLETED)
        if filters.priority is not None:
            conditions.append(Task.priority == filters.priority)
        if filters.is_weekly_deliverable is not None:
            conditions.append(Task.is_weekly_deliverable.is_(filters.is_weekly_deliverable))
        return conditions

    async def list_paginated(
        self,
        filters: TaskFilters,
        *,
        limit: int | None = 20,
        offset: int = 0,
    ) -> tuple[list[Task], int]:
        """Return tasks matching the provided filters along with the total count."""
        conditions = self._conditions(filters)
        query = select(Task)
        for condition in conditions:
            query = query.where(condition)
        query = query.order_by(Task.id)
        return await self._paginate(query, self._count_of(*conditions), limit=limit, offset=offset)

    async def list_all(self, filters: TaskFilters) -> list[Task]:
        tasks, _ = await self.list_paginated(filters, limit=None)
        return tasks


class ReviewRepository(BaseRepository[Review]):
    """Append-only access to task review history."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Review)

    async def list_for_task(self, task_id: int) -> list[Review]:
        """Return the review history of a task, oldest first."""
        result = await self.session.execute(
            select(Review).where(Review.task_id == task_id).order_by(Review.created_at, Review.id)
        )
        return list(result.scalars().all())
