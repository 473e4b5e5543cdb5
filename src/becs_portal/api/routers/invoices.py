"""Invoice endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from ...deps import CurrentUserDependency, DatabaseSessionDependency, PrivilegedUserDependency
from ...models import InvoiceStatus, today
from ...schemas import InvoiceCreate, InvoiceRead, InvoiceSummary, InvoiceUpdate
from ...services import InvoiceService

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.post(
    "",
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Raise an invoice",
)
async def create_invoice(
    payload: InvoiceCreate,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> InvoiceRead:
    invoice = await InvoiceService(session).create_invoice(current_user, payload)
    return InvoiceRead.from_invoice(invoice, today())


@router.get("", response_model=list[InvoiceRead], summary="List invoices")
async def list_invoices(
    session: DatabaseSessionDependency,
    _: CurrentUserDependency,
    project_id: Annotated[int | None, Query(ge=1)] = None,
    invoice_status: Annotated[
        InvoiceStatus | None,
        Query(alias="status", description="Matched against the effective status."),
    ] = None,
) -> list[InvoiceRead]:
    on = today()
    invoices = await InvoiceService(session).list_invoices(
        project_id=project_id,
        status=invoice_status,
        on=on,
    )
    return [InvoiceRead.from_invoice(invoice, on) for invoice in invoices]


@router.get("/summary", response_model=InvoiceSummary, summary="Totals per effective status")
async def invoice_summary(
    session: DatabaseSessionDependency,
    _: CurrentUserDependency,
    project_id: Annotated[int | None, Query(ge=1)] = None,
) -> InvoiceSummary:
    return await InvoiceService(session).summary(project_id=project_id)


@router.get("/{invoice_id}", response_model=InvoiceRead, summary="Fetch an invoice")
async def read_invoice(
    invoice_id: int,
    session: DatabaseSessionDependency,
    _: CurrentUserDependency,
) -> InvoiceRead:
    invoice = await InvoiceService(session).get_invoice(invoice_id)
    return InvoiceRead.from_invoice(invoice, today())


@router.patch("/{invoice_id}", response_model=InvoiceRead, summary="Update an invoice")
async def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> InvoiceRead:
    invoice = await InvoiceService(session).update_invoice(current_user, invoice_id, payload)
    return InvoiceRead.from_invoice(invoice, today())


@router.post("/{invoice_id}/pay", response_model=InvoiceRead, summary="Mark an invoice paid")
async def pay_invoice(
    invoice_id: int,
    session: DatabaseSessionDependency,
    current_user: PrivilegedUserDependency,
) -> InvoiceRead:
    invoice = await InvoiceService(session).mark_paid(current_user, invoice_id)
    return InvoiceRead.from_invoice(invoice, today())
