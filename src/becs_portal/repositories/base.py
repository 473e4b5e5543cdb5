"""Base repository implementation supporting asynchronous SQLModel sessions."""

from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import func
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Provide shared persistence helpers for repositories."""

    def __init__(self, session: AsyncSession, model_type: type[ModelType]) -> None:
        self._session = session
        self._model_type = model_type

    @property
    def session(self) -> AsyncSession:
        """Return the session associated with the repository."""
        return self._session

    async def get(self, entity_id: int) -> ModelType | None:
        """Retrieve a model instance by its primary key."""
        return await self._session.get(self._model_type, entity_id)

    async def list_by_ids(self, ids: Sequence[int]) -> list[ModelType]:
        """Fetch every entity whose primary key is in ``ids``."""
        if not ids:
            return []
        column = getattr(self._model_type, "id")
        result = await self._session.execute(select(self._model_type).where(column.in_(list(set(ids)))))
        return list(result.scalars().all())

    async def add(self, instance: ModelType) -> ModelType:
        """Add and flush a new entity instance."""
        self._session.add(instance)
        await self._session.flush()
        return instance

    async def delete(self, instance: ModelType) -> None:
        """Delete an entity instance and flush the change."""
        await self._session.delete(instance)
        await self._session.flush()

    async def refresh(self, instance: ModelType) -> ModelType:
        """Refresh an entity from the database and return it."""
        await self._session.refresh(instance)
        return instance

    async def _paginate(
        self,
        query: Any,
        count_query: Any,
        *,
        limit: int | None,
        offset: int,
    ) -> tuple[list[ModelType], int]:
        """Run ``query`` with pagination applied alongside its total count."""
        if limit is not None:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)
        result = await self._session.execute(query)
        items = list(result.scalars().all())
        total_result = await self._session.execute(count_query)
        return items, int(total_result.scalar_one())

    def _count_of(self, *conditions: Any) -> Any:
        query = select(func.count()).select_from(self._model_type)
        for condition in conditions:
            query = query.where(condition)
        return query
