"""Repository for the document template library."""

from __future__ import annotations

from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import DocumentTemplate
from .base import BaseRepository


class TemplateRepository(BaseRepository[DocumentTemplate]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, DocumentTemplate)

    async def list_filtered(
        self,
        *,
        category: str | None = None,
        search: str | None = None,
    ) -> list[DocumentTemplate]:
        """Filter by exact category and a case-insensitive substring search."""
        query = select(DocumentTemplate)
        if category:
            query = query.where(func.lower(DocumentTemplate.category) == category.strip().lower())
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            query = query.where(
                or_(
                    func.lower(DocumentTemplate.name).like(pattern),
                    func.lower(func.coalesce(DocumentTemplate.description, "")).like(pattern),
                    func.lower(DocumentTemplate.category).like(pattern),
                )
            )
        result = await self.session.execute(
            query.order_by(DocumentTemplate.created_at.desc(), DocumentTemplate.id.desc())
        )
        return list(result.scalars().all())

    async def category_counts(self) -> list[tuple[str, int]]:
        result = await self.session.execute(
            select(DocumentTemplate.category, func.count(DocumentTemplate.id))
            .group_by(DocumentTemplate.category)
            .order_by(DocumentTemplate.category)
        )
        return [(category, int(count)) for category, count in result.all()]
