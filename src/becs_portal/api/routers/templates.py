"""Document template library endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, Query, Response, UploadFile, status
from fastapi.responses import FileResponse

from ...deps import (
    CurrentUserDependency,
    DatabaseSessionDependency,
    FileStorageDependency,
    PrivilegedUserDependency,
)
from ...schemas import TemplateCategory, TemplateRead
from ...services import TemplateService

router = APIRouter(prefix="/templates", tags=["templates"])


@router.post(
    "/upload",
    response_model=TemplateRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document template",
)
async def upload_template(
    session: DatabaseSessionDependency,
    storage: FileStorageDependency,
    current_user: PrivilegedUserDependency,
    name: str = Form(""),
    category: str = Form(""),
    description: str | None = Form(None),
    file: UploadFile | None = File(None),
) -> TemplateRead:
    template = await TemplateService(session, storage).upload(
        current_user,
        name=name,
        category=category,
        upload=file,
        description=description,
    )
    return TemplateRead.model_validate(template)


@router.get("", response_model=list[TemplateRead], summary="List templates")
async def list_templates(
    session: DatabaseSessionDependency,
    storage: FileStorageDependency,
    _: CurrentUserDependency,
    category: Annotated[str | None, Query()] = None,
    search: Annotated[str | None, Query(description="Matches name, description or category.")] = None,
) -> list[TemplateRead]:
    templates = await TemplateService(session, storage).list_templates(category=category, search=search)
    return [TemplateRead.model_validate(template) for template in templates]


@router.get("/categories", response_model=list[TemplateCategory], summary="Template categories")
async def list_template_categories(
    session: DatabaseSessionDependency,
    storage: FileStorageDependency,
    _: CurrentUserDependency,
) -> list[TemplateCategory]:
    counts = await TemplateService(session, storage).categories()
    return [TemplateCategory(name=name, count=count) for name, count in counts]


@router.get("/{template_id}", response_model=TemplateRead, summary="Fetch a template")
async def read_template(
    template_id: int,
    session: DatabaseSessionDependency,
    storage: FileStorageDependency,
    _: CurrentUserDependency,
) -> TemplateRead:
    template = await TemplateService(session, storage).get_template(template_id)
    return TemplateRead.model_validate(template)


@router.get("/{template_id}/download", summary="Download a template")
async def download_template(
    template_id: int,
    session: DatabaseSessionDependency,
    storage: FileStorageDependency,
    _: CurrentUserDependency,
) -> FileResponse:
    download = await TemplateService(session, storage).get_download(template_id)
    return FileResponse(
        download.path,
        filename=download.filename,
        media_type=download.content_type or "application/octet-stream",
    )


@router.delete(
    "/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a template",
)
async def delete_template(
    template_id: int,
    session: DatabaseSessionDependency,
    storage: FileStorageDependency,
    current_user: PrivilegedUserDependency,
) -> Response:
    await TemplateService(session, storage).delete(current_user, template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
