"""Staff directory schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ..models import UserRole

USER_EXAMPLE = {
    "id": 7,
    "email": "amina.otieno@example.com",
    "first_name": "Amina",
    "last_name": "Otieno",
    "full_name": "Amina Otieno",
    "staff_id": "BECS-007",
    "role": UserRole.STAFF.value,
    "department": "Health Economics",
    "position": "Analyst",
    "phone_number": "+254700000007",
    "is_active": True,
    "created_at": "2024-01-08T09:00:00Z",
}


def _strip_optional(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class UserPublic(BaseModel):
    """Public representation of a staff member."""

    model_config = ConfigDict(from_attributes=True, json_schema_extra={"example": USER_EXAMPLE})

    id: int
    email: EmailStr
    first_name: str
    last_name: str
    full_name: str
    staff_id: str | None = None
    role: UserRole
    department: str | None = None
    position: str | None = None
    phone_number: str | None = None
    is_active: bool
    created_at: datetime


class UserCreate(BaseModel):
    """Payload for registering a staff member."""

    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    staff_id: str | None = Field(default=None, max_length=50)
    role: UserRole = UserRole.STAFF
    department: str | None = Field(default=None, max_length=100)
    position: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=50)
    is_active: bool = True

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip_names(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("staff_id", "department", "position", "phone_number", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        return _strip_optional(value)


class UserSelfUpdate(BaseModel):
    """Profile fields a staff member may change on their own account."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    department: str | None = Field(default=None, max_length=100)
    position: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=50)
    password: str | None = Field(default=None, min_length=6, max_length=128)

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "UserSelfUpdate":
        if not self.model_dump(exclude_unset=True):
            raise ValueError("At least one field must be provided for update.")
        return self


class UserUpdate(UserSelfUpdate):
    """Administrative update including identity, role and activation."""

    email: EmailStr | None = None
    staff_id: str | None = Field(default=None, max_length=50)
    role: UserRole | None = None
    is_active: bool | None = None

    @field_validator("staff_id", mode="before")
    @classmethod
    def _blank_staff_id(cls, value: object) -> object:
        return _strip_optional(value)


SELF_EDITABLE_FIELDS = frozenset(UserSelfUpdate.model_fields)


__all__ = ["SELF_EDITABLE_FIELDS", "UserCreate", "UserPublic", "UserSelfUpdate", "UserUpdate"]
