"""Repository for interacting with user persistence models."""

from __future__ import annotations

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import User, UserRole
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Concrete repository for CRUD operations on ``User`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        """Return a user matching the supplied email, ignoring case."""
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_staff_id(self, staff_id: str) -> User | None:
        result = await self.session.execute(select(User).where(User.staff_id == staff_id.strip()))
        return result.scalar_one_or_none()

    async def get_by_reference(self, reference: str) -> User | None:
        """Resolve a user from either a staff id or an email address."""
        reference = reference.strip()
        if not reference:
            return None
        if "@" in reference:
            return await self.get_by_email(reference)
        return await self.get_by_staff_id(reference)

    async def list_filtered(
        self,
        *,
        role: UserRole | None = None,
        department: str | None = None,
        is_active: bool | None = None,
    ) -> list[User]:
        query = select(User)
        if role is not None:
            query = query.where(User.role == role)
        if department is not None:
            query = query.where(func.lower(User.department) == department.strip().lower())
        if is_active is not None:
            query = query.where(User.is_active.is_(is_active))
        result = await self.session.execute(query.order_by(User.last_name, User.first_name, User.id))
        return list(result.scalars().all())

    async def count_active(self) -> int:
        result = await self.session.execute(self._count_of(User.is_active.is_(True)))
        return int(result.scalar_one())

    async def list_departments(self) -> list[str]:
        result = await self.session.execute(
            select(User.department)
            .where(User.department.is_not(None), User.is_active.is_(True))
            .distinct()
            .order_by(User.department)
        )
        return [department for department in result.scalars().all() if department]
