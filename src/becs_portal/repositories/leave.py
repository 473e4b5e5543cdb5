"""Repository for leave applications."""

from __future__ import annotations

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import LeaveApplication, LeaveStatus
from .base import BaseRepository


class LeaveApplicationRepository(BaseRepository[LeaveApplication]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, LeaveApplication)

    async def list_filtered(
        self,
        *,
        user_id: int | None = None,
        status: LeaveStatus | None = None,
    ) -> list[LeaveApplication]:
        query = select(LeaveApplication)
        if user_id is not None:
            query = query.where(LeaveApplication.user_id == user_id)
        if status is not None:
            query = query.where(LeaveApplication.status == status)
        result = await self.session.execute(
            query.order_by(LeaveApplication.created_at.desc(), LeaveApplication.id.desc())
        )
        return list(result.scalars().all())
