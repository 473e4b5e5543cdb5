"""Document template library."""

from __future__ import annotations

import logging

from fastapi import UploadFile
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.storage import FileDownload, FileStorage
from ..errors import NotFoundError, ValidationError
from ..models import DocumentTemplate, User
from ..repositories import TemplateRepository

logger = logging.getLogger(__name__)

TEMPLATE_UPLOAD_NAMESPACE = "templates"


class TemplateService:
    def __init__(self, session: AsyncSession, storage: FileStorage) -> None:
        self._session = session
        self._storage = storage
        self._repository = TemplateRepository(session)

    async def _get_or_404(self, template_id: int) -> DocumentTemplate:
        template = await self._repository.get(template_id)
        if template is None:
            raise NotFoundError(f"Template {template_id} does not exist.")
        return template

    async def upload(
        self,
        actor: User,
        *,
        name: str,
        category: str,
        upload: UploadFile | None,
        description: str | None = None,
    ) -> DocumentTemplate:
        fields: dict[str, str] = {}
        if not name or not name.strip():
            fields["name"] = "Name is required."
        if not category or not category.strip():
            fields["category"] = "Category is required."
        if fields:
            raise ValidationError("Template details are incomplete.", fields=fields)

        stored = await self._storage.save(upload, namespace=TEMPLATE_UPLOAD_NAMESPACE)
        template = DocumentTemplate(
            name=name.strip(),
            category=category.strip().lower(),
            description=description.strip() if description and description.strip() else None,
            file_name=stored.original_name,
            file_key=stored.key,
            file_size=stored.size,
            content_type=stored.content_type,
            uploaded_by_id=actor.id,
        )
        try:
            await self._repository.add(template)
            await self._session.commit()
        except Exception:
            self._storage.delete(stored.key)
            raise
        await self._repository.refresh(template)
        logger.info(
            "Template uploaded",
            extra={"template_id": template.id, "category": template.category, "actor_id": actor.id},
        )
        return template

    async def list_templates(
        self,
        *,
        category: str | None = None,
        search: str | None = None,
    ) -> list[DocumentTemplate]:
        return await self._repository.list_filtered(category=category, search=search)

    async def categories(self) -> list[tuple[str, int]]:
        return await self._repository.category_counts()

    async def get_template(self, template_id: int) -> DocumentTemplate:
        return await self._get_or_404(template_id)

    async def get_download(self, template_id: int) -> FileDownload:
        template = await self._get_or_404(template_id)
        return FileDownload(
            path=self._storage.resolve(template.file_key),
            filename=template.file_name,
            content_type=template.content_type,
        )

    async def delete(self, actor: User, template_id: int) -> None:
        template = await self._get_or_404(template_id)
        key = template.file_key
        await self._repository.delete(template)
        await self._session.commit()
        self._storage.delete(key)
        logger.info("Template deleted", extra={"template_id": template_id, "actor_id": actor.id})


__all__ = ["TemplateService"]
