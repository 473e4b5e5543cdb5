"""Service layer orchestrating staff directory operations."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.security import hash_password
from ..errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from ..models import User, UserRole
from ..repositories import UserRepository
from ..schemas import UserCreate, UserSelfUpdate, UserUpdate
from ..schemas.user import SELF_EDITABLE_FIELDS

logger = logging.getLogger(__name__)


class UserService:
    """High-level business operations for ``User`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = UserRepository(session)

    async def _ensure_unique(
        self,
        *,
        email: str | None,
        staff_id: str | None,
        exclude_id: int | None = None,
    ) -> None:
        if email is not None:
            existing = await self._repository.get_by_email(email)
            if existing is not None and existing.id != exclude_id:
                raise ConflictError("Email is already registered.", code="email_taken")
        if staff_id is not None:
            existing = await self._repository.get_by_staff_id(staff_id)
            if existing is not None and existing.id != exclude_id:
                raise ConflictError("Staff id is already in use.", code="staff_id_taken")

    async def create_user(self, payload: UserCreate) -> User:
        """Create and persist a new user record."""
        email = str(payload.email).lower()
        await self._ensure_unique(email=email, staff_id=payload.staff_id)
        values = payload.model_dump(exclude={"password", "email"})
        user = User(
            **values,
            email=email,
            hashed_password=hash_password(payload.password),
        )
        await self._repository.add(user)
        await self._session.commit()
        await self._repository.refresh(user)
        logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
        return user

    async def get_user(self, user_id: int) -> User:
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} does not exist.")
        return user

    async def get_user_by_email(self, email: str) -> User | None:
        """Fetch a user by their unique email address."""
        return await self._repository.get_by_email(email)

    async def list_users(
        self,
        *,
        role: UserRole | None = None,
        department: str | None = None,
        is_active: bool | None = None,
    ) -> list[User]:
        return await self._repository.list_filtered(
            role=role,
            department=department,
            is_active=is_active,
        )

    async def update_user(
        self,
        actor: User,
        user_id: int,
        payload: UserUpdate | UserSelfUpdate,
    ) -> User:
        """Apply updates; staff may only edit their own profile fields."""
        user = await self.get_user(user_id)
        updates = payload.model_dump(exclude_unset=True)
        if not actor.is_privileged:
            if actor.id != user.id:
                raise PermissionDeniedError("You may only update your own profile.")
            restricted = sorted(set(updates) - SELF_EDITABLE_FIELDS)
            if restricted:
                raise PermissionDeniedError(
                    "Only admins and directors may change these fields.",
                    details={"fields": restricted},
                )
        for required in ("first_name", "last_name", "email", "role", "is_active"):
            if required in updates and updates[required] is None:
                raise ValidationError(f"{required} cannot be empty.", fields={required: "Cannot be empty."})
        if actor.id == user.id and updates.get("is_active") is False:
            raise ConflictError("You cannot deactivate your own account.")

        if "email" in updates:
            updates["email"] = str(updates["email"]).lower()
        await self._ensure_unique(
            email=updates.get("email"),
            staff_id=updates.get("staff_id"),
            exclude_id=user.id,
        )
        password = updates.pop("password", None)
        for field_name, value in updates.items():
            setattr(user, field_name, value)
        if password is not None:
            user.hashed_password = hash_password(password)
        await self._session.commit()
        await self._repository.refresh(user)
        logger.info(
            "User updated",
            extra={"user_id": user.id, "actor_id": actor.id, "fields": sorted(updates)},
        )
        return user


__all__ = ["UserService"]
