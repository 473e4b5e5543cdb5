"""CSV bulk import endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Response

from ...deps import DatabaseSessionDependency, PrivilegedUserDependency
from ...schemas import BulkImportRequest, BulkImportResult, ImportType
from ...services import BulkImportService
from ...services.bulk_import import generate_template

router = APIRouter(prefix="/bulk-import", tags=["bulk-import"])


@router.post("", response_model=BulkImportResult, summary="Import records from CSV text")
async def bulk_import(
    payload: BulkImportRequest,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> BulkImportResult:
    return await BulkImportService(session).run(current_user, payload.type, payload.csv_data)


@router.get(
    "/templates/{import_type}",
    response_class=Response,
    summary="Download a CSV template for an import type",
)
async def download_import_template(
    import_type: ImportType,
    _: PrivilegedUserDependency,
) -> Response:
    return Response(
        content=generate_template(import_type),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{import_type.value}-template.csv"'},
    )
