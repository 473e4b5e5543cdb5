"""Task and review schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from ..models import OVERDUE, ReviewDecision, Task, TaskPriority, TaskStatus

TASK_READ_EXAMPLE = {
    "id": 1,
    "title": "Draft Report",
    "description": "Quarterly financing review, first draft.",
    "status": TaskStatus.SUBMITTED.value,
    "effective_status": TaskStatus.SUBMITTED.value,
    "is_overdue": False,
    "priority": TaskPriority.HIGH.value,
    "project_id": 3,
    "assignee_id": 7,
    "reviewer_id": 2,
    "created_by_id": 1,
    "target_completion_date": "2024-03-29",
    "is_weekly_deliverable": True,
    "file_name": "draft-report.docx",
    "file_size": 48213,
    "submission_notes": "First pass, tables pending.",
    "uploaded_at": "2024-03-25T14:12:00Z",
    "completed_at": None,
    "created_at": "2024-03-18T08:00:00Z",
    "updated_at": "2024-03-25T14:12:00Z",
}


def _normalise_status(value: object) -> object:
    if isinstance(value, str):
        return TaskStatus(value)
    return value


def _normalise_decision(value: object) -> object:
    if isinstance(value, str):
        return ReviewDecision(value)
    return value


def _strip_title(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


TitleStr = Annotated[str, BeforeValidator(_strip_title), Field(min_length=1, max_length=255)]
TaskStatusInput = Annotated[TaskStatus, BeforeValidator(_normalise_status)]
ReviewDecisionInput = Annotated[ReviewDecision, BeforeValidator(_normalise_decision)]


class TaskCreate(BaseModel):
    """Payload for creating a new task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Draft Report",
                "project_id": 3,
                "assignee_id": 7,
                "reviewer_id": 2,
                "priority": TaskPriority.HIGH.value,
                "target_completion_date": "2024-03-29",
                "is_weekly_deliverable": True,
            }
        }
    )

    title: TitleStr
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    project_id: int = Field(ge=1)
    assignee_id: int | None = Field(default=None, ge=1)
    reviewer_id: int | None = Field(default=None, ge=1)
    target_completion_date: date | None = None
    is_weekly_deliverable: bool = False


class TaskUpdate(BaseModel):
    """Partial update of task details; status changes go through the workflow."""

    title: TitleStr | None = None
    description: str | None = None
    priority: TaskPriority | None = None
    project_id: int | None = Field(default=None, ge=1)
    assignee_id: int | None = Field(default=None, ge=1)
    reviewer_id: int | None = Field(default=None, ge=1)
    target_completion_date: date | None = None
    is_weekly_deliverable: bool | None = None

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "TaskUpdate":
        if not self.model_dump(exclude_unset=True):
            raise ValueError("At least one field must be provided for update.")
        return self


class TaskStatusUpdate(BaseModel):
    """Manual status change request."""

    status: TaskStatusInput


class TaskRead(BaseModel):
    """Public representation of a task including the overdue overlay."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": TASK_READ_EXAMPLE},
    )

    id: int
    title: str
    description: str | None = None
    status: TaskStatus
    effective_status: str
    is_overdue: bool
    priority: TaskPriority
    project_id: int
    assignee_id: int | None = None
    reviewer_id: int | None = None
    created_by_id: int | None = None
    target_completion_date: date | None = None
    is_weekly_deliverable: bool
    file_name: str | None = None
    file_size: int | None = None
    file_content_type: str | None = None
    submission_notes: str | None = None
    uploaded_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_task(cls, task: Task, on: date) -> "TaskRead":
        data = {name: getattr(task, name) for name in cls.model_fields if hasattr(task, name)}
        data["is_overdue"] = task.is_overdue(on)
        data["effective_status"] = task.effective_status(on)
        return cls.model_validate(data)


class TaskListResponse(BaseModel):
    """Paginated collection of tasks."""

    items: list[TaskRead]
    total: int
    limit: int
    offset: int


class ReviewCreate(BaseModel):
    """Reviewer decision on a submitted task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"decision": ReviewDecision.APPROVED.value, "comments": "Good."}
        }
    )

    decision: ReviewDecisionInput
    comments: str


class ReviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    reviewer_id: int
    decision: ReviewDecision
    comments: str
    created_at: datetime


class ReviewOutcome(BaseModel):
    """Recorded review together with the task it moved."""

    review: ReviewRead
    task: TaskRead


class DeliverableItem(BaseModel):
    """One deliverable to fan out across a consortium's projects."""

    title: Annotated[str, BeforeValidator(_strip_title), Field(max_length=255)]
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee_id: int | None = Field(default=None, ge=1)
    reviewer_id: int | None = Field(default=None, ge=1)
    target_completion_date: date | None = None
    is_weekly_deliverable: bool = False


class DeliverableBatch(BaseModel):
    deliverables: list[DeliverableItem]


class DeliverableBatchResult(BaseModel):
    consortium: str
    project_count: int
    created: list[TaskRead]


TASK_STATUS_FILTER_VALUES = tuple(member.value for member in TaskStatus) + (OVERDUE,)


__all__ = [
    "DeliverableBatch",
    "DeliverableBatchResult",
    "DeliverableItem",
    "ReviewCreate",
    "ReviewOutcome",
    "ReviewRead",
    "TASK_STATUS_FILTER_VALUES",
    "TaskCreate",
    "TaskListResponse",
    "TaskRead",
    "TaskStatusUpdate",
    "TaskUpdate",
]
