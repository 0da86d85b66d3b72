# vetms/api/invoices.py

from typing import List

from fastapi import APIRouter
from sqlalchemy import func, select

from vetms.db.engine import get_engine
from vetms.db.schema import clients, invoice_items, invoices, pets
from vetms.models.invoices import (
    InvoiceDetailOut,
    InvoiceDraft,
    InvoiceResult,
    InvoiceSummaryOut,
)
from vetms.services import invoices as invoice_service

router = APIRouter(prefix="/invoices", tags=["invoices"])

RECENT_LIMIT = 10


def _list_summaries(limit=None) -> List[InvoiceSummaryOut]:
    pet_names = func.nullif(func.group_concat(pets.c.name.distinct()), "")

    stmt = (
        select(
            invoices.c.id,
            invoices.c.friendly_id,
            invoices.c.date,
            invoices.c.status,
            invoices.c.total_amount,
            clients.c.name.label("client_name"),
            pet_names.label("pet_names"),
        )
        .select_from(
            invoices.join(clients)
            .outerjoin(invoice_items, invoice_items.c.invoice_id == invoices.c.id)
            .outerjoin(pets, pets.c.id == invoice_items.c.pet_id)
        )
        .group_by(invoices.c.id)
        .order_by(invoices.c.id.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)

    with get_engine().connect() as conn:
        rows = conn.execute(stmt).mappings().all()

    return [InvoiceSummaryOut(**row) for row in rows]


@router.get("", response_model=List[InvoiceSummaryOut])
def list_invoices() -> List[InvoiceSummaryOut]:
    """
    All invoices, newest first, with the client name and the pets billed.
    """
    return _list_summaries()


@router.get("/recent", response_model=List[InvoiceSummaryOut])
def list_recent_invoices() -> List[InvoiceSummaryOut]:
    return _list_summaries(limit=RECENT_LIMIT)


@router.post("", response_model=InvoiceResult, status_code=201)
def create_invoice(draft: InvoiceDraft) -> InvoiceResult:
    return invoice_service.create_invoice(draft)


@router.get("/{invoice_id}", response_model=InvoiceDetailOut)
def get_invoice(invoice_id: int) -> InvoiceDetailOut:
    """
    Invoice header with client fields, and its items joined with pet name/species.
    """
    return invoice_service.get_invoice(invoice_id)


@router.put("/{invoice_id}", response_model=InvoiceResult)
def update_invoice(invoice_id: int, draft: InvoiceDraft) -> InvoiceResult:
    return invoice_service.update_invoice(invoice_id, draft)


@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: int) -> dict:
    invoice_service.delete_invoice(invoice_id)
    return {"ok": True}
