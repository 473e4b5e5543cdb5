"""Attendance ledger schemas."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models import AttendanceState, as_utc


class ClockRequest(BaseModel):
    notes: str | None = Field(default=None, max_length=1000)


class AttendanceCreate(BaseModel):
    """Manual entry or correction of a user's attendance for a day."""

    user_id: int = Field(ge=1)
    work_date: date
    time_in: datetime
    time_out: datetime | None = None
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("time_in", "time_out")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        """Naive times are taken as UTC so both ends compare."""
        return as_utc(value)

    @model_validator(mode="after")
    def _check_order(self) -> "AttendanceCreate":
        if self.time_out is not None and self.time_out < self.time_in:
            raise ValueError("time_out cannot be before time_in.")
        return self


class AttendanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    work_date: date
    time_in: datetime | None = None
    time_out: datetime | None = None
    total_hours: float | None = None
    state: AttendanceState
    notes: str | None = None


class AttendanceSummary(BaseModel):
    """Aggregated hours for one user over a date range."""

    user_id: int
    date_from: date | None = None
    date_to: date | None = None
    total_hours: float
    days_present: int
    completed_days: int
    average_hours: float


__all__ = ["AttendanceCreate", "AttendanceRead", "AttendanceSummary", "ClockRequest"]
