"""Leave application models."""

from datetime import date, datetime
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin, enum_column


class LeaveType(str, Enum):
    ANNUAL = "annual"
    SICK = "sick"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    EMERGENCY = "emergency"
    STUDY = "study"
    COMPASSIONATE = "compassionate"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


class LeaveApplication(TimestampMixin, SQLModel, table=True):
    """A request for time off, decided by a privileged user."""

    __tablename__ = "leave_applications"
    __table_args__ = (
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_applications_date_order"),
        sa.Index("ix_leave_applications_user_id", "user_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    leave_type: LeaveType = Field(
        sa_column=enum_column(LeaveType, "leave_type"),
    )
    start_date: date = Field(sa_column=sa.Column(sa.Date(), nullable=False))
    end_date: date = Field(sa_column=sa.Column(sa.Date(), nullable=False))
    total_days: int = Field(sa_column=sa.Column(sa.Integer(), nullable=False))
    reason: str = Field(sa_column=sa.Column(sa.Text(), nullable=False))
    attachment_url: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=1024), nullable=True),
    )
    status: LeaveStatus = Field(
        default=LeaveStatus.PENDING,
        sa_column=enum_column(LeaveStatus, "leave_status", default=LeaveStatus.PENDING),
    )
    reviewer_id: int | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )
    reviewed_at: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    review_comments: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )


__all__ = ["LeaveApplication", "LeaveStatus", "LeaveType", "inclusive_days"]
