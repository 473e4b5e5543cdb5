"""Attendance ledger model."""

from datetime import date, datetime, timezone
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin


class AttendanceState(str, Enum):
    """Display state derived from which ends of the record are filled in."""

    ABSENT = "absent"
    PRESENT = "present"
    COMPLETED = "completed"


def hours_between(time_in: datetime, time_out: datetime) -> float:
    """Return elapsed hours between two instants rounded to two decimals.

    Naive values are read as UTC. Raises ``ValueError`` when ``time_out``
    precedes ``time_in``.
    """
    start = time_in.replace(tzinfo=timezone.utc) if time_in.tzinfo is None else time_in
    end = time_out.replace(tzinfo=timezone.utc) if time_out.tzinfo is None else time_out
    if end < start:
        raise ValueError("time_out cannot be before time_in.")
    return round((end - start).total_seconds() / 3600, 2)


class AttendanceRecord(TimestampMixin, SQLModel, table=True):
    """A clock-in/clock-out pair for one user on one working day."""

    __tablename__ = "attendance_records"
    __table_args__ = (
        sa.Index("ix_attendance_records_user_date", "user_id", "work_date"),
        sa.CheckConstraint(
            "time_out IS NULL OR time_in IS NULL OR time_out >= time_in",
            name="ck_attendance_records_time_order",
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    work_date: date = Field(
        sa_column=sa.Column(sa.Date(), nullable=False),
    )
    time_in: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    time_out: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    total_hours: float | None = Field(
        default=None,
        sa_column=sa.Column(sa.Float(), nullable=True),
    )
    notes: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )

    @property
    def is_open(self) -> bool:
        return self.time_in is not None and self.time_out is None

    @property
    def state(self) -> AttendanceState:
        if self.time_in is None:
            return AttendanceState.ABSENT
        if self.time_out is None:
            return AttendanceState.PRESENT
        return AttendanceState.COMPLETED

    def close(self, time_out: datetime) -> None:
        if self.time_in is None:
            raise ValueError("Cannot close an attendance record that was never opened.")
        self.time_out = time_out
        self.total_hours = hours_between(self.time_in, time_out)


__all__ = ["AttendanceRecord", "AttendanceState", "hours_between"]
