"""Bulk CSV import schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ImportType(str, Enum):
    STAFF = "staff"
    PROJECTS = "projects"
    TASKS = "tasks"
    ATTENDANCE = "attendance"


class BulkImportRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": ImportType.PROJECTS.value,
                "csv_data": "name,code,type,consortium\nCounty Review,AHP-C2-004,AHP,consortium_2\n",
            }
        }
    )

    type: ImportType
    csv_data: str = Field(min_length=1)


class BulkImportRowError(BaseModel):
    row: int = Field(description="1-based data row number, header excluded")
    message: str


class BulkImportResult(BaseModel):
    type: ImportType
    total_rows: int
    created: int
    errors: list[BulkImportRowError]


__all__ = ["BulkImportRequest", "BulkImportResult", "BulkImportRowError", "ImportType"]
