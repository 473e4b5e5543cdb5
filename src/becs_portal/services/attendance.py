"""Attendance ledger: clock-in/out and manual corrections."""

from __future__ import annotations

import logging
from datetime import date, datetime

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from ..models import AttendanceRecord, User, as_utc, hours_between, utcnow
from ..repositories import AttendanceRepository, UserRepository
from ..schemas import AttendanceCreate, AttendanceSummary

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = AttendanceRepository(session)
        self._users = UserRepository(session)

    async def clock_in(self, actor: User, notes: str | None = None, *, at: datetime | None = None) -> AttendanceRecord:
        """Open today's record; a user may hold at most one open record."""
        open_record = await self._repository.get_open_for_user(actor.id)
        if open_record is not None:
            raise ConflictError(
                "You are already clocked in.",
                code="already_clocked_in",
                details={"record_id": open_record.id},
            )
        now = at or utcnow()
        record = AttendanceRecord(
            user_id=actor.id,
            work_date=now.date(),
            time_in=now,
            notes=notes,
        )
        await self._repository.add(record)
        await self._session.commit()
        await self._repository.refresh(record)
        logger.info("Clocked in", extra={"user_id": actor.id, "record_id": record.id})
        return record

    async def clock_out(self, actor: User, notes: str | None = None, *, at: datetime | None = None) -> AttendanceRecord:
        record = await self._repository.get_open_for_user(actor.id)
        if record is None:
            raise ConflictError("You are not clocked in.", code="not_clocked_in")
        now = at or utcnow()
        time_in = as_utc(record.time_in)
        if time_in is not None and now < time_in:
            raise ValidationError("Clock-out cannot be before clock-in.")
        record.close(now)
        if notes:
            record.notes = f"{record.notes}\n{notes}" if record.notes else notes
        await self._session.commit()
        await self._repository.refresh(record)
        logger.info(
            "Clocked out",
            extra={"user_id": actor.id, "record_id": record.id, "total_hours": record.total_hours},
        )
        return record

    def _scope_user(self, actor: User, user_id: int | None) -> int | None:
        if actor.is_privileged:
            return user_id
        if user_id is not None and user_id != actor.id:
            raise PermissionDeniedError("You may only view your own attendance.")
        return actor.id

    async def list_records(
        self,
        actor: User,
        *,
        user_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[AttendanceRecord]:
        _check_range(date_from, date_to)
        return await self._repository.list_filtered(
            user_id=self._scope_user(actor, user_id),
            date_from=date_from,
            date_to=date_to,
        )

    async def today(self, actor: User, *, on: date | None = None) -> list[AttendanceRecord]:
        """The caller's records for today; privileged users see everyone's."""
        day = on or utcnow().date()
        return await self._repository.list_filtered(
            user_id=None if actor.is_privileged else actor.id,
            date_from=day,
            date_to=day,
        )

    async def summary(
        self,
        actor: User,
        *,
        user_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> AttendanceSummary:
        _check_range(date_from, date_to)
        target = self._scope_user(actor, user_id) or actor.id
        records = await self._repository.list_filtered(
            user_id=target,
            date_from=date_from,
            date_to=date_to,
        )
        completed = [record for record in records if record.total_hours is not None]
        total_hours = round(sum(record.total_hours or 0.0 for record in completed), 2)
        days_present = len({record.work_date for record in records if record.time_in is not None})
        completed_days = len({record.work_date for record in completed})
        return AttendanceSummary(
            user_id=target,
            date_from=date_from,
            date_to=date_to,
            total_hours=total_hours,
            days_present=days_present,
            completed_days=completed_days,
            average_hours=round(total_hours / completed_days, 2) if completed_days else 0.0,
        )

    async def record_manual(self, actor: User, payload: AttendanceCreate) -> AttendanceRecord:
        """Insert or correct the record for ``user_id`` on ``work_date``."""
        if not actor.is_privileged:
            raise PermissionDeniedError("Only admins and directors may record attendance manually.")
        user = await self._users.get(payload.user_id)
        if user is None:
            raise ValidationError(
                "Unknown user.",
                fields={"user_id": f"User {payload.user_id} does not exist."},
            )
        existing = await self._repository.list_filtered(
            user_id=payload.user_id,
            date_from=payload.work_date,
            date_to=payload.work_date,
        )
        if payload.time_out is None:
            open_record = await self._repository.get_open_for_user(payload.user_id)
            if open_record is not None and (not existing or open_record.id != existing[0].id):
                raise ConflictError(
                    "User already has an open attendance record.",
                    code="already_clocked_in",
                    details={"record_id": open_record.id},
                )
        record = existing[0] if existing else AttendanceRecord(user_id=payload.user_id, work_date=payload.work_date)
        record.time_in = payload.time_in
        record.time_out = payload.time_out
        record.total_hours = (
            hours_between(payload.time_in, payload.time_out) if payload.time_out is not None else None
        )
        if payload.notes is not None:
            record.notes = payload.notes
        if record.id is None:
            await self._repository.add(record)
        await self._session.commit()
        await self._repository.refresh(record)
        logger.info(
            "Attendance recorded manually",
            extra={"user_id": payload.user_id, "record_id": record.id, "actor_id": actor.id},
        )
        return record

    async def get_record(self, actor: User, record_id: int) -> AttendanceRecord:
        record = await self._repository.get(record_id)
        if record is None:
            raise NotFoundError(f"Attendance record {record_id} does not exist.")
        self._scope_user(actor, record.user_id)
        return record


def _check_range(date_from: date | None, date_to: date | None) -> None:
    if date_from is not None and date_to is not None and date_to < date_from:
        raise ValidationError(
            "date_to cannot be before date_from.",
            fields={"date_to": "date_to cannot be before date_from."},
        )


__all__ = ["AttendanceService"]
