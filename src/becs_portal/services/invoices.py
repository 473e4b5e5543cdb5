"""Invoice tracking service."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Invoice, InvoiceStatus, User, today, utcnow
from ..repositories import InvoiceRepository, ProjectRepository
from ..schemas import InvoiceCreate, InvoiceSummary, InvoiceUpdate
from ..schemas.invoice import InvoiceStatusTotals

logger = logging.getLogger(__name__)


class InvoiceService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = InvoiceRepository(session)
        self._projects = ProjectRepository(session)

    async def _get_or_404(self, invoice_id: int) -> Invoice:
        invoice = await self._repository.get(invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} does not exist.")
        return invoice

    async def _ensure_number_available(self, number: str, exclude_id: int | None = None) -> None:
        existing = await self._repository.get_by_number(number)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(f"Invoice number {number!r} already exists.", code="invoice_number_taken")

    async def create_invoice(self, actor: User, payload: InvoiceCreate) -> Invoice:
        if await self._projects.get(payload.project_id) is None:
            raise ValidationError(
                "Unknown project.",
                fields={"project_id": f"Project {payload.project_id} does not exist."},
            )
        number = payload.invoice_number.strip()
        await self._ensure_number_available(number)
        invoice = Invoice(**payload.model_dump(exclude={"invoice_number"}), invoice_number=number)
        if invoice.status is InvoiceStatus.PAID:
            invoice.paid_at = utcnow()
        await self._repository.add(invoice)
        await self._session.commit()
        await self._repository.refresh(invoice)
        logger.info(
            "Invoice created",
            extra={"invoice_id": invoice.id, "project_id": invoice.project_id, "actor_id": actor.id},
        )
        return invoice

    async def get_invoice(self, invoice_id: int) -> Invoice:
        return await self._get_or_404(invoice_id)

    async def list_invoices(
        self,
        *,
        project_id: int | None = None,
        status: InvoiceStatus | None = None,
        on: date | None = None,
    ) -> list[Invoice]:
        return await self._repository.list_filtered(
            on=on or today(),
            project_id=project_id,
            status=status,
        )

    async def update_invoice(self, actor: User, invoice_id: int, payload: InvoiceUpdate) -> Invoice:
        invoice = await self._get_or_404(invoice_id)
        updates = payload.model_dump(exclude_unset=True)
        for required in ("invoice_number", "amount", "due_date", "status"):
            if required in updates and updates[required] is None:
                raise ValidationError(f"{required} cannot be empty.", fields={required: "Cannot be empty."})
        if "invoice_number" in updates:
            updates["invoice_number"] = updates["invoice_number"].strip()
            await self._ensure_number_available(updates["invoice_number"], exclude_id=invoice.id)
        status = updates.get("status")
        if status is InvoiceStatus.PAID and invoice.status is not InvoiceStatus.PAID:
            invoice.paid_at = utcnow()
        elif status is not None and status is not InvoiceStatus.PAID:
            invoice.paid_at = None
        for field_name, value in updates.items():
            setattr(invoice, field_name, value)
        await self._session.commit()
        await self._repository.refresh(invoice)
        logger.info(
            "Invoice updated",
            extra={"invoice_id": invoice.id, "actor_id": actor.id, "fields": sorted(updates)},
        )
        return invoice

    async def mark_paid(self, actor: User, invoice_id: int) -> Invoice:
        invoice = await self._get_or_404(invoice_id)
        if invoice.status is InvoiceStatus.PAID:
            raise ConflictError("Invoice is already paid.", code="invoice_already_paid")
        invoice.status = InvoiceStatus.PAID
        invoice.paid_at = utcnow()
        await self._session.commit()
        await self._repository.refresh(invoice)
        logger.info("Invoice paid", extra={"invoice_id": invoice.id, "actor_id": actor.id})
        return invoice

    async def summary(self, *, project_id: int | None = None, on: date | None = None) -> InvoiceSummary:
        """Count and total amount per effective status."""
        day = on or today()
        invoices = await self._repository.list_filtered(on=day, project_id=project_id)
        totals = {status: InvoiceStatusTotals() for status in InvoiceStatus}
        for invoice in invoices:
            bucket = totals[invoice.effective_status(day)]
            bucket.count += 1
            bucket.total_amount = (bucket.total_amount + Decimal(invoice.amount)).quantize(Decimal("0.01"))
        return InvoiceSummary(
            paid=totals[InvoiceStatus.PAID],
            unpaid=totals[InvoiceStatus.UNPAID],
            overdue=totals[InvoiceStatus.OVERDUE],
        )


__all__ = ["InvoiceService"]
