"""Document template library model."""

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin


class DocumentTemplate(TimestampMixin, SQLModel, table=True):
    """A reusable document stored alongside its category tag."""

    __tablename__ = "document_templates"
    __table_args__ = (sa.Index("ix_document_templates_category", "category"),)

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    category: str = Field(
        max_length=100,
        sa_column=sa.Column(sa.String(length=100), nullable=False),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    file_name: str = Field(sa_column=sa.Column(sa.String(length=255), nullable=False))
    file_key: str = Field(sa_column=sa.Column(sa.String(length=512), nullable=False))
    file_size: int = Field(sa_column=sa.Column(sa.BigInteger(), nullable=False))
    content_type: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=255), nullable=True),
    )
    uploaded_by_id: int | None = Field(
        default=None,
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
    )


__all__ = ["DocumentTemplate"]
