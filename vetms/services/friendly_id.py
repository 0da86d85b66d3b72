# vetms/services/friendly_id.py

from typing import Optional

from sqlalchemy import Integer, cast, func, select
from sqlalchemy.engine import Connection

from vetms.config import get_settings
from vetms.db.schema import invoices

SEQUENCE_WIDTH = 4


def format_friendly_id(prefix: str, number: int) -> str:
    # numbers past 9999 widen instead of wrapping
    return f"{prefix}-{number:0{SEQUENCE_WIDTH}d}"


def next_friendly_id(conn: Connection, prefix: Optional[str] = None) -> str:
    """
    Next "PREFIX-NNNN" id after the highest numeric suffix already issued.

    Read-then-increment: call it on the connection of the transaction that
    inserts the invoice.
    """
    prefix = prefix or get_settings().invoice_prefix
    head = f"{prefix}-"

    suffix = cast(func.substr(invoices.c.friendly_id, len(head) + 1), Integer)
    last = conn.execute(
        select(func.max(suffix)).where(
            invoices.c.friendly_id.startswith(head, autoescape=True)
        )
    ).scalar()

    return format_friendly_id(prefix, (last or 0) + 1)
