"""Template library schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TemplateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    description: str | None = None
    file_name: str
    file_size: int
    content_type: str | None = None
    uploaded_by_id: int | None = None
    created_at: datetime


class TemplateCategory(BaseModel):
    name: str
    count: int


__all__ = ["TemplateCategory", "TemplateRead"]
