"""Repository for invoice persistence."""

from __future__ import annotations

from datetime import date

from sqlalchemy import and_, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Invoice, InvoiceStatus
from .base import BaseRepository


class InvoiceRepository(BaseRepository[Invoice]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Invoice)

    async def get_by_number(self, invoice_number: str) -> Invoice | None:
        result = await self.session.execute(
            select(Invoice).where(Invoice.invoice_number == invoice_number.strip())
        )
        return result.scalar_one_or_none()

    async def list_filtered(
        self,
        *,
        on: date,
        project_id: int | None = None,
        status: InvoiceStatus | None = None,
    ) -> list[Invoice]:
        """List invoices, matching ``status`` against the effective status on ``on``."""
        query = select(Invoice)
        if project_id is not None:
            query = query.where(Invoice.project_id == project_id)
        if status is InvoiceStatus.OVERDUE:
            query = query.where(
                or_(
                    Invoice.status == InvoiceStatus.OVERDUE,
                    and_(Invoice.status == InvoiceStatus.UNPAID, Invoice.due_date < on),
                )
            )
        elif status is InvoiceStatus.UNPAID:
            query = query.where(Invoice.status == InvoiceStatus.UNPAID, Invoice.due_date >= on)
        elif status is not None:
            query = query.where(Invoice.status == status)
        result = await self.session.execute(query.order_by(Invoice.due_date, Invoice.id))
        return list(result.scalars().all())
