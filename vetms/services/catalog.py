# vetms/services/catalog.py
"""
Product catalog: the read path used by the invoice engine plus the small
catalog-maintenance workflow (upsert, rename, delete, price-list import).
"""

import logging
import math
import re
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.exc import IntegrityError

from vetms.db.engine import begin_write, get_engine
from vetms.db.schema import invoice_items, products
from vetms.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

HEADER_NAME_RE = re.compile(r"^(service|name)$", re.IGNORECASE)
HEADER_PRICE_RE = re.compile(r"^price$", re.IGNORECASE)

_product_columns = (products.c.id, products.c.name, products.c.price)


def find_product(conn: Connection, product_id: int) -> Optional[RowMapping]:
    return conn.execute(
        select(*_product_columns).where(products.c.id == product_id)
    ).mappings().first()


def search_products(query: Optional[str] = None) -> List[RowMapping]:
    query = (query or "").strip()
    stmt = select(*_product_columns).order_by(products.c.name)
    if query:
        stmt = stmt.where(products.c.name.like(f"%{query}%")).limit(50)
    else:
        stmt = stmt.limit(500)

    with get_engine().connect() as conn:
        return conn.execute(stmt).mappings().all()


def _upsert(conn: Connection, name: str, price: Decimal) -> None:
    stmt = sqlite_insert(products).values(name=name, price=price)
    stmt = stmt.on_conflict_do_update(
        index_elements=[products.c.name],
        set_={"price": stmt.excluded.price},
    )
    conn.execute(stmt)


def upsert_product(name: str, price: Decimal) -> Tuple[RowMapping, bool]:
    """Insert a product or update the price of the one with that name.

    Returns the stored row and whether it was newly created.
    """
    name = name.strip()
    if not name:
        raise ValidationError.for_field("name", "Product name is required")

    with begin_write() as conn:
        existed = conn.execute(
            select(products.c.id).where(products.c.name == name)
        ).first() is not None
        _upsert(conn, name, price)
        row = conn.execute(
            select(*_product_columns).where(products.c.name == name)
        ).mappings().one()

    return row, not existed


def update_product(product_id: int, name: str, price: Decimal) -> RowMapping:
    name = name.strip()
    if not name:
        raise ValidationError.for_field("name", "Product name is required")

    try:
        with begin_write() as conn:
            result = conn.execute(
                update(products)
                .where(products.c.id == product_id)
                .values(name=name, price=price)
            )
            if result.rowcount == 0:
                raise NotFoundError("Product not found")
            return find_product(conn, product_id)
    except IntegrityError as exc:
        raise ConflictError(f"A product named {name!r} already exists") from exc


def delete_product(product_id: int) -> None:
    with begin_write() as conn:
        # name/price snapshots on the items keep the history readable
        conn.execute(
            update(invoice_items)
            .where(invoice_items.c.product_id == product_id)
            .values(product_id=None)
        )
        result = conn.execute(products.delete().where(products.c.id == product_id))
        if result.rowcount == 0:
            raise NotFoundError("Product not found")


# ---- Price list import ----

def _detect_delimiter(line: str) -> str:
    if "\t" in line:
        return "\t"
    if ";" in line:
        return ";"
    return ","


def parse_price(value: str) -> Optional[Decimal]:
    value = value.strip().replace(",", ".")
    if not value:
        return None
    try:
        price = Decimal(value)
    except InvalidOperation:
        return None
    if not price.is_finite() or not math.isfinite(float(price)) or price < 0:
        return None
    return price


def parse_price_list(text: str) -> Tuple[List[Tuple[str, Decimal]], int]:
    """
    Parse a pasted "name<delim>price" list, one product per line.

    The delimiter is picked per line (tab, then semicolon, then comma) and
    decimal commas are accepted. Header lines and rows without a usable price
    are counted as skipped.
    """
    rows: List[Tuple[str, Decimal]] = []
    skipped = 0

    lines = [line.strip() for line in re.split(r"\r?\n", text or "")]
    for line in filter(None, lines):
        parts = [p.strip() for p in line.split(_detect_delimiter(line))]
        if len(parts) < 2:
            skipped += 1
            continue

        name, raw_price = parts[0], parts[1]
        if not name or HEADER_NAME_RE.match(name) or HEADER_PRICE_RE.match(raw_price):
            skipped += 1
            continue

        price = parse_price(raw_price)
        if price is None:
            skipped += 1
            continue

        rows.append((name, price))

    return rows, skipped


def import_price_list(text: str) -> dict:
    if not (text or "").strip():
        raise ValidationError.for_field("csv", "No rows found")

    rows, skipped = parse_price_list(text)
    if not rows:
        raise ValidationError.for_field("csv", "No valid rows found")

    with begin_write() as conn:
        for name, price in rows:
            _upsert(conn, name, price)

    logger.info("Imported %s products (%s lines skipped)", len(rows), skipped)
    return {"processed": len(rows), "skipped": skipped}
