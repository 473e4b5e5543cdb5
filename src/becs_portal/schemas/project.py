"""Project registry schemas."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models import Consortium, ProjectStatus, ProjectType

PROJECT_READ_EXAMPLE = {
    "id": 3,
    "code": "AHP-C1-001",
    "name": "Community Health Financing Review",
    "type": ProjectType.AHP.value,
    "consortium": Consortium.CONSORTIUM_1.value,
    "status": ProjectStatus.ACTIVE.value,
    "client_name": "Ministry of Health",
    "description": "Quarterly review of county health financing.",
    "start_date": "2024-01-15",
    "end_date": "2024-12-20",
    "is_archived": False,
    "task_count": 4,
    "completed_task_count": 1,
    "completion_percentage": 25.0,
    "created_at": "2024-01-10T08:00:00Z",
    "updated_at": "2024-02-01T10:30:00Z",
}


def _check_consortium(project_type: ProjectType | None, consortium: Consortium | None) -> None:
    if consortium is not None and project_type is not ProjectType.AHP:
        raise ValueError("Only AHP projects can belong to a consortium.")


def _check_dates(start: date | None, end: date | None) -> None:
    if start is not None and end is not None and end < start:
        raise ValueError("end_date cannot be before start_date.")


class ProjectCreate(BaseModel):
    """Payload for registering a project."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "AHP-C1-001",
                "name": "Community Health Financing Review",
                "type": ProjectType.AHP.value,
                "consortium": Consortium.CONSORTIUM_1.value,
                "client_name": "Ministry of Health",
                "start_date": "2024-01-15",
                "end_date": "2024-12-20",
            }
        }
    )

    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    type: ProjectType
    consortium: Consortium | None = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    client_name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("code", "name", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _validate_relationships(self) -> "ProjectCreate":
        _check_consortium(self.type, self.consortium)
        _check_dates(self.start_date, self.end_date)
        return self


class ProjectUpdate(BaseModel):
    """Partial project update; status may be set to any value."""

    code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: ProjectType | None = None
    consortium: Consortium | None = None
    status: ProjectStatus | None = None
    client_name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    is_archived: bool | None = None

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "ProjectUpdate":
        if not self.model_dump(exclude_unset=True):
            raise ValueError("At least one field must be provided for update.")
        return self


class ProjectRead(BaseModel):
    """Public representation of a project with task progress."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": PROJECT_READ_EXAMPLE},
    )

    id: int
    code: str
    name: str
    type: ProjectType
    consortium: Consortium | None = None
    status: ProjectStatus
    client_name: str | None = None
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    is_archived: bool
    task_count: int = 0
    completed_task_count: int = 0
    completion_percentage: float = 0.0
    created_at: datetime
    updated_at: datetime


class ConsortiumGroup(BaseModel):
    consortium: str
    projects: list[ProjectRead]


class GroupedProjects(BaseModel):
    """AHP projects bucketed by consortium next to the private portfolio."""

    ahp: list[ConsortiumGroup]
    private: list[ProjectRead]


__all__ = [
    "ConsortiumGroup",
    "GroupedProjects",
    "ProjectCreate",
    "ProjectRead",
    "ProjectUpdate",
]
