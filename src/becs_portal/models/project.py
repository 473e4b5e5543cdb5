"""Project registry models."""

from datetime import date
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin, enum_column


class ProjectType(str, Enum):
    """Funding category of a project."""

    AHP = "AHP"
    PRIVATE = "Private"


class ProjectStatus(str, Enum):
    """Lifecycle label of a project; any value may be set directly."""

    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"


class Consortium(str, Enum):
    """The five AHP consortium buckets."""

    CONSORTIUM_1 = "consortium_1"
    CONSORTIUM_2 = "consortium_2"
    CONSORTIUM_3 = "consortium_3"
    CONSORTIUM_4 = "consortium_4"
    CONSORTIUM_5 = "consortium_5"

    @property
    def number(self) -> int:
        return int(self.value.rsplit("_", 1)[1])

    @classmethod
    def from_number(cls, number: int) -> "Consortium":
        return cls(f"consortium_{number}")


class Project(TimestampMixin, SQLModel, table=True):
    """Persistent project model."""

    __tablename__ = "projects"
    __table_args__ = (
        sa.CheckConstraint("length(code) > 0", name="ck_projects_code_length"),
        sa.Index("ix_projects_type_consortium", "type", "consortium"),
    )

    id: int | None = Field(default=None, primary_key=True)
    code: str = Field(
        max_length=50,
        sa_column=sa.Column(sa.String(length=50), nullable=False, unique=True),
    )
    name: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    type: ProjectType = Field(
        sa_column=enum_column(ProjectType, "project_type"),
    )
    consortium: Consortium | None = Field(
        default=None,
        sa_column=enum_column(Consortium, "project_consortium", nullable=True),
    )
    status: ProjectStatus = Field(
        default=ProjectStatus.ACTIVE,
        sa_column=enum_column(ProjectStatus, "project_status", default=ProjectStatus.ACTIVE),
    )
    client_name: str | None = Field(
        default=None,
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=True),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    start_date: date | None = Field(
        default=None,
        sa_column=sa.Column(sa.Date(), nullable=True),
    )
    end_date: date | None = Field(
        default=None,
        sa_column=sa.Column(sa.Date(), nullable=True),
    )
    is_archived: bool = Field(
        default=False,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    created_by_id: int | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )


__all__ = ["Consortium", "Project", "ProjectStatus", "ProjectType"]
