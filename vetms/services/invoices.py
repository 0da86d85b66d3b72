# vetms/services/invoices.py
"""
Invoice transaction engine.

Turns a validated `InvoiceDraft` into one invoice header plus its line items,
reconciling the client and pets on the way. Every public write runs inside a
single transaction: a failure at any step leaves no client, pet, invoice or
item rows behind.
"""

import datetime as dt
import logging
from decimal import Decimal
from typing import Callable, List, TypeVar

from sqlalchemy import select, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from vetms.config import get_settings
from vetms.db.engine import begin_write, get_engine
from vetms.db.schema import clients, invoice_items, invoices, pets
from vetms.errors import ConflictError, NotFoundError, ProductNotFoundError, ValidationError
from vetms.models.invoices import (
    InvoiceDetailOut,
    InvoiceDraft,
    InvoiceHeaderOut,
    InvoiceItemOut,
    InvoiceResult,
)
from vetms.services.catalog import find_product
from vetms.services.friendly_id import next_friendly_id
from vetms.services.reconcile import resolve_client, resolve_pet

logger = logging.getLogger(__name__)

T = TypeVar("T")


def draft_total(draft: InvoiceDraft) -> Decimal:
    """Sum of quantity x declared unit price over every item of every pet."""
    return sum((item.line_total for item in draft.iter_items()), Decimal("0"))


def _is_unique_violation(exc: IntegrityError) -> bool:
    return "UNIQUE constraint failed" in str(exc.orig)


def _run_write(work: Callable[[Connection], T], action: str) -> T:
    """
    Run `work` in its own transaction, retrying the whole unit when it trips a
    unique constraint (a concurrent writer took the same friendly id or name).
    """
    attempts = get_settings().write_retries + 1
    engine = get_engine()

    for attempt in range(1, attempts + 1):
        try:
            with begin_write(engine) as conn:
                return work(conn)
        except IntegrityError as exc:
            if not _is_unique_violation(exc):
                raise
            logger.warning(
                "Invoice %s conflict (attempt %s/%s): %s",
                action, attempt, attempts, exc.orig,
            )
            last_error = exc

    raise ConflictError(
        f"Invoice {action} conflicted with another write, please retry"
    ) from last_error


def _build_item_rows(
    conn: Connection,
    invoice_id: int,
    client_id: int,
    draft: InvoiceDraft,
) -> List[dict]:
    rows = []

    for p_idx, group in enumerate(draft.pets):
        pet_id = resolve_pet(conn, group.pet_name, group.pet_species, client_id)

        for i_idx, item in enumerate(group.items):
            field = f"pets.{p_idx}.items.{i_idx}"

            if item.product_id is not None:
                product = find_product(conn, item.product_id)
                if product is None:
                    raise ProductNotFoundError(item.product_id, field=f"{field}.productId")
                product_id = product["id"]
                name = product["name"]
            else:
                product_id = None
                name = (item.custom_name or "").strip()
                if not name:
                    raise ValidationError.for_field(
                        f"{field}.customName", "Custom item name required"
                    )

            # the declared unit price is what gets billed, even for catalog items
            rows.append(
                {
                    "invoice_id": invoice_id,
                    "pet_id": pet_id,
                    "product_id": product_id,
                    "product_name_snapshot": name,
                    "quantity": item.quantity,
                    "price_snapshot": item.unit_price,
                }
            )

    return rows


def create_invoice(draft: InvoiceDraft) -> InvoiceResult:
    invoice_date = draft.date or dt.date.today()

    def _create(conn: Connection) -> InvoiceResult:
        client_id = resolve_client(conn, draft.client_name, draft.contact_info)
        total = draft_total(draft)
        friendly_id = next_friendly_id(conn)

        result = conn.execute(
            invoices.insert().values(
                friendly_id=friendly_id,
                client_id=client_id,
                pet_id=None,
                date=invoice_date,
                status=draft.status.value,
                total_amount=total,
            )
        )
        invoice_id = result.inserted_primary_key[0]

        conn.execute(
            invoice_items.insert(),
            _build_item_rows(conn, invoice_id, client_id, draft),
        )

        return InvoiceResult(invoice_id=invoice_id, friendly_id=friendly_id, total=total)

    created = _run_write(_create, "create")
    logger.info(
        "Created invoice %s (%s), total %s",
        created.invoice_id, created.friendly_id, created.total,
    )
    return created


def update_invoice(invoice_id: int, draft: InvoiceDraft) -> InvoiceResult:
    """Replace an invoice's header fields and its whole item set.

    The friendly id is kept. Items are deleted and re-inserted rather than
    diffed, so item ids change on every edit.
    """
    invoice_date = draft.date or dt.date.today()

    def _update(conn: Connection) -> InvoiceResult:
        client_id = resolve_client(conn, draft.client_name, draft.contact_info)
        total = draft_total(draft)

        result = conn.execute(
            update(invoices)
            .where(invoices.c.id == invoice_id)
            .values(
                client_id=client_id,
                pet_id=None,
                date=invoice_date,
                status=draft.status.value,
                total_amount=total,
            )
        )
        if result.rowcount == 0:
            raise NotFoundError("Invoice not found")

        conn.execute(invoice_items.delete().where(invoice_items.c.invoice_id == invoice_id))
        conn.execute(
            invoice_items.insert(),
            _build_item_rows(conn, invoice_id, client_id, draft),
        )

        friendly_id = conn.execute(
            select(invoices.c.friendly_id).where(invoices.c.id == invoice_id)
        ).scalar_one()

        return InvoiceResult(invoice_id=invoice_id, friendly_id=friendly_id, total=total)

    updated = _run_write(_update, "update")
    logger.info(
        "Updated invoice %s (%s), total %s",
        updated.invoice_id, updated.friendly_id, updated.total,
    )
    return updated


def delete_invoice(invoice_id: int) -> None:
    with begin_write() as conn:
        conn.execute(invoice_items.delete().where(invoice_items.c.invoice_id == invoice_id))
        result = conn.execute(invoices.delete().where(invoices.c.id == invoice_id))
        if result.rowcount == 0:
            raise NotFoundError("Invoice not found")

    logger.info("Deleted invoice %s", invoice_id)


def get_invoice(invoice_id: int) -> InvoiceDetailOut:
    header_stmt = (
        select(
            invoices.c.id,
            invoices.c.friendly_id,
            invoices.c.date,
            invoices.c.status,
            invoices.c.total_amount,
            clients.c.id.label("client_id"),
            clients.c.name.label("client_name"),
            clients.c.contact_info,
        )
        .select_from(invoices.join(clients))
        .where(invoices.c.id == invoice_id)
    )

    items_stmt = (
        select(
            invoice_items.c.id,
            invoice_items.c.pet_id,
            invoice_items.c.product_id,
            invoice_items.c.product_name_snapshot,
            invoice_items.c.quantity,
            invoice_items.c.price_snapshot,
            pets.c.name.label("pet_name"),
            pets.c.species.label("pet_species"),
        )
        .select_from(
            invoice_items.outerjoin(pets, pets.c.id == invoice_items.c.pet_id)
        )
        .where(invoice_items.c.invoice_id == invoice_id)
        .order_by(invoice_items.c.pet_id, invoice_items.c.id)
    )

    with get_engine().connect() as conn:
        header = conn.execute(header_stmt).mappings().first()
        if header is None:
            raise NotFoundError("Invoice not found")
        items = conn.execute(items_stmt).mappings().all()

    return InvoiceDetailOut(
        invoice=InvoiceHeaderOut(**header),
        items=[InvoiceItemOut(**row) for row in items],
    )
