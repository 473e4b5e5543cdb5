"""Staff directory models built with SQLModel."""

from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin, enum_column


class UserRole(str, Enum):
    """Roles supported by the authentication system."""

    ADMIN = "admin"
    DIRECTOR = "director"
    STAFF = "staff"

    @property
    def is_privileged(self) -> bool:
        return self in PRIVILEGED_ROLES


PRIVILEGED_ROLES = frozenset({UserRole.ADMIN, UserRole.DIRECTOR})


class UserBase(SQLModel, table=False):
    """Shared attributes for user models."""

    email: str = Field(
        max_length=320,
        sa_column=sa.Column(sa.String(length=320), nullable=False, unique=True),
    )
    first_name: str = Field(
        max_length=100,
        sa_column=sa.Column(sa.String(length=100), nullable=False),
    )
    last_name: str = Field(
        max_length=100,
        sa_column=sa.Column(sa.String(length=100), nullable=False),
    )
    staff_id: str | None = Field(
        default=None,
        max_length=50,
        sa_column=sa.Column(sa.String(length=50), nullable=True, unique=True),
    )
    department: str | None = Field(
        default=None,
        max_length=100,
        sa_column=sa.Column(sa.String(length=100), nullable=True),
    )
    position: str | None = Field(
        default=None,
        max_length=100,
        sa_column=sa.Column(sa.String(length=100), nullable=True),
    )
    phone_number: str | None = Field(
        default=None,
        max_length=50,
        sa_column=sa.Column(sa.String(length=50), nullable=True),
    )
    is_active: bool = Field(
        default=True,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    role: UserRole = Field(
        default=UserRole.STAFF,
        sa_column=enum_column(UserRole, "user_role", default=UserRole.STAFF),
    )


class User(UserBase, TimestampMixin, table=True):
    """Persistent user model."""

    __tablename__ = "users"
    __table_args__ = (sa.Index("ix_users_email", "email"),)

    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_privileged(self) -> bool:
        return self.role.is_privileged


__all__ = ["PRIVILEGED_ROLES", "User", "UserBase", "UserRole"]
