"""Repository for attendance records."""

from __future__ import annotations

from datetime import date

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import AttendanceRecord
from .base import BaseRepository


class AttendanceRepository(BaseRepository[AttendanceRecord]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AttendanceRecord)

    async def get_open_for_user(self, user_id: int) -> AttendanceRecord | None:
        """Return the user's record that has a clock-in but no clock-out."""
        result = await self.session.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.time_in.is_not(None),
                AttendanceRecord.time_out.is_(None),
            )
            .order_by(AttendanceRecord.time_in.desc())
        )
        return result.scalars().first()

    async def list_filtered(
        self,
        *,
        user_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[AttendanceRecord]:
        query = select(AttendanceRecord)
        if user_id is not None:
            query = query.where(AttendanceRecord.user_id == user_id)
        if date_from is not None:
            query = query.where(AttendanceRecord.work_date >= date_from)
        if date_to is not None:
            query = query.where(AttendanceRecord.work_date <= date_to)
        result = await self.session.execute(
            query.order_by(AttendanceRecord.work_date.desc(), AttendanceRecord.id.desc())
        )
        return list(result.scalars().all())
