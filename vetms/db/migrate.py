# vetms/db/migrate.py
"""
Idempotent schema setup, run on every process start.

`metadata.create_all` only creates missing tables. Columns added after the
first release are patched in with additive ALTERs, each guarded by a look at
the live table so re-running never fails on a duplicate column.
"""

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine

from vetms.db.engine import begin_write

from vetms.db.schema import metadata

logger = logging.getLogger(__name__)

# (table, column, DDL type) added after the initial schema
ADDITIVE_COLUMNS = [
    ("invoice_items", "pet_id", "INTEGER"),
]


def _column_names(conn: Connection, table: str) -> set:
    return {col["name"] for col in inspect(conn).get_columns(table)}


def apply_additive_columns(conn: Connection) -> list:
    applied = []
    existing_tables = set(inspect(conn).get_table_names())

    for table, column, ddl_type in ADDITIVE_COLUMNS:
        if table not in existing_tables:
            continue
        if column in _column_names(conn, table):
            continue
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}"))
        logger.info("Added missing column %s.%s", table, column)
        applied.append(f"{table}.{column}")

    return applied


def ensure_schema(engine: Engine) -> None:
    if not metadata.tables:
        raise RuntimeError("Schema metadata is empty; refusing to start")

    try:
        with begin_write(engine) as conn:
            metadata.create_all(conn)
            apply_additive_columns(conn)
    except Exception:
        logger.exception("Schema initialisation failed")
        raise

    logger.info("Schema ready (%s tables)", len(metadata.tables))
