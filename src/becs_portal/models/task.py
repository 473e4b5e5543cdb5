"""Task and review models for the deliverable workflow."""

from datetime import date, datetime
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin, as_utc, enum_column, utcnow

_REWORK_ALIASES = frozenset({"rework_required", "rework", "needs-rework"})


class TaskStatus(str, Enum):
    """Stored workflow states; ``overdue`` is derived and never stored."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    NEEDS_REWORK = "needs_rework"
    COMPLETED = "completed"

    @classmethod
    def _missing_(cls, value: object) -> "TaskStatus | None":
        if not isinstance(value, str):
            return None
        normalised = value.strip().lower()
        if normalised in _REWORK_ALIASES:
            return cls.NEEDS_REWORK
        for member in cls:
            if member.value == normalised:
                return member
        return None


OVERDUE = "overdue"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ReviewDecision(str, Enum):
    """Outcome recorded by a reviewer."""

    APPROVED = "approved"
    NEEDS_REWORK = "needs_rework"
    REJECTED = "rejected"

    @classmethod
    def _missing_(cls, value: object) -> "ReviewDecision | None":
        if not isinstance(value, str):
            return None
        normalised = value.strip().lower()
        if normalised in _REWORK_ALIASES:
            return cls.NEEDS_REWORK
        for member in cls:
            if member.value == normalised:
                return member
        return None


class Task(TimestampMixin, SQLModel, table=True):
    """Persistent task model."""

    __tablename__ = "tasks"
    __table_args__ = (
        sa.CheckConstraint("length(title) > 0", name="ck_tasks_title_length"),
        sa.Index("ix_tasks_assignee_id", "assignee_id"),
        sa.Index("ix_tasks_reviewer_id", "reviewer_id"),
        sa.Index("ix_tasks_project_id", "project_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    status: TaskStatus = Field(
        default=TaskStatus.NOT_STARTED,
        sa_column=enum_column(TaskStatus, "task_status", default=TaskStatus.NOT_STARTED),
    )
    priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        sa_column=enum_column(TaskPriority, "task_priority", default=TaskPriority.MEDIUM),
    )
    project_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("projects.id", ondelete="RESTRICT"),
            nullable=False,
        ),
    )
    assignee_id: int | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )
    reviewer_id: int | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )
    created_by_id: int | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )
    target_completion_date: date | None = Field(
        default=None,
        sa_column=sa.Column(sa.Date(), nullable=True),
    )
    is_weekly_deliverable: bool = Field(
        default=False,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    file_name: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=255), nullable=True),
    )
    file_key: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=512), nullable=True),
    )
    file_size: int | None = Field(
        default=None,
        sa_column=sa.Column(sa.BigInteger(), nullable=True),
    )
    file_content_type: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=255), nullable=True),
    )
    submission_notes: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    uploaded_at: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    completed_at: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )

    def is_overdue(self, on: date | None = None) -> bool:
        """A task is overdue once its target date has passed without completion."""
        if self.target_completion_date is None or self.status is TaskStatus.COMPLETED:
            return False
        reference = on or utcnow().date()
        return reference > self.target_completion_date

    def effective_status(self, on: date | None = None) -> str:
        return OVERDUE if self.is_overdue(on) else self.status.value

    def completed_on(self) -> date | None:
        completed = as_utc(self.completed_at)
        return completed.date() if completed is not None else None


class Review(SQLModel, table=True):
    """Immutable review entry appended to a task's history."""

    __tablename__ = "reviews"
    __table_args__ = (
        sa.CheckConstraint("length(comments) > 0", name="ck_reviews_comments_length"),
        sa.Index("ix_reviews_task_id", "task_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    task_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    reviewer_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="RESTRICT"),
            nullable=False,
        ),
    )
    decision: ReviewDecision = Field(
        sa_column=enum_column(ReviewDecision, "review_decision"),
    )
    comments: str = Field(
        sa_column=sa.Column(sa.Text(), nullable=False),
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now()},
    )


__all__ = ["OVERDUE", "Review", "ReviewDecision", "Task", "TaskPriority", "TaskStatus"]
