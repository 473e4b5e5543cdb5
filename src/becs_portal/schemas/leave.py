"""Leave application schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models import LeaveStatus, LeaveType


class LeaveApplicationCreate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "leave_type": LeaveType.ANNUAL.value,
                "start_date": "2024-07-01",
                "end_date": "2024-07-05",
                "reason": "Family trip planned since January.",
            }
        }
    )

    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(min_length=10, max_length=2000)
    attachment_url: str | None = Field(default=None, max_length=1024)

    @field_validator("reason", mode="before")
    @classmethod
    def _strip_reason(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _check_dates(self) -> "LeaveApplicationCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date.")
        return self


class LeaveDecision(BaseModel):
    """Privileged decision on a pending application."""

    status: Literal["approved", "rejected"]
    comments: str | None = Field(default=None, max_length=2000)


class LeaveApplicationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    reason: str
    attachment_url: str | None = None
    status: LeaveStatus
    reviewer_id: int | None = None
    reviewed_at: datetime | None = None
    review_comments: str | None = None
    created_at: datetime


__all__ = ["LeaveApplicationCreate", "LeaveApplicationRead", "LeaveDecision"]
