"""Invoice models."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .common import TimestampMixin, enum_column


class InvoiceStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"
    OVERDUE = "overdue"


class Invoice(TimestampMixin, SQLModel, table=True):
    """Persistent invoice raised against a project."""

    __tablename__ = "invoices"
    __table_args__ = (
        sa.CheckConstraint("amount > 0", name="ck_invoices_amount_positive"),
        sa.Index("ix_invoices_project_id", "project_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    project_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("projects.id", ondelete="RESTRICT"),
            nullable=False,
        ),
    )
    invoice_number: str = Field(
        max_length=50,
        sa_column=sa.Column(sa.String(length=50), nullable=False, unique=True),
    )
    amount: Decimal = Field(
        sa_column=sa.Column(sa.Numeric(12, 2), nullable=False),
    )
    due_date: date = Field(
        sa_column=sa.Column(sa.Date(), nullable=False),
    )
    status: InvoiceStatus = Field(
        default=InvoiceStatus.UNPAID,
        sa_column=enum_column(InvoiceStatus, "invoice_status", default=InvoiceStatus.UNPAID),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    paid_at: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )

    def effective_status(self, on: date) -> InvoiceStatus:
        """Unpaid invoices past their due date read as overdue."""
        if self.status is InvoiceStatus.UNPAID and on > self.due_date:
            return InvoiceStatus.OVERDUE
        return self.status


__all__ = ["Invoice", "InvoiceStatus"]
