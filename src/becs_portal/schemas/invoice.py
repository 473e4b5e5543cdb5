"""Invoice schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models import Invoice, InvoiceStatus


class InvoiceCreate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "project_id": 3,
                "invoice_number": "INV-2024-001",
                "amount": "12500.00",
                "due_date": "2024-04-30",
            }
        }
    )

    project_id: int = Field(ge=1)
    invoice_number: str = Field(min_length=1, max_length=50)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    due_date: date
    status: InvoiceStatus = InvoiceStatus.UNPAID
    description: str | None = None


class InvoiceUpdate(BaseModel):
    invoice_number: str | None = Field(default=None, min_length=1, max_length=50)
    amount: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    due_date: date | None = None
    status: InvoiceStatus | None = None
    description: str | None = None

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "InvoiceUpdate":
        if not self.model_dump(exclude_unset=True):
            raise ValueError("At least one field must be provided for update.")
        return self


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    invoice_number: str
    amount: Decimal
    due_date: date
    status: InvoiceStatus
    effective_status: InvoiceStatus
    description: str | None = None
    paid_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_invoice(cls, invoice: Invoice, on: date) -> "InvoiceRead":
        return cls(
            id=invoice.id,
            project_id=invoice.project_id,
            invoice_number=invoice.invoice_number,
            amount=invoice.amount,
            due_date=invoice.due_date,
            status=invoice.status,
            effective_status=invoice.effective_status(on),
            description=invoice.description,
            paid_at=invoice.paid_at,
            created_at=invoice.created_at,
        )


class InvoiceStatusTotals(BaseModel):
    count: int = 0
    total_amount: Decimal = Decimal("0.00")


class InvoiceSummary(BaseModel):
    """Counts and totals per effective status."""

    paid: InvoiceStatusTotals
    unpaid: InvoiceStatusTotals
    overdue: InvoiceStatusTotals


__all__ = [
    "InvoiceCreate",
    "InvoiceRead",
    "InvoiceStatusTotals",
    "InvoiceSummary",
    "InvoiceUpdate",
]
