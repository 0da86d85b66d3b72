# vetms/db/engine.py

from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from vetms.config import get_settings

# execution option naming the SQLite BEGIN mode ("IMMEDIATE" for writers)
BEGIN_MODE = "sqlite_begin_mode"


def _configure_sqlite(engine: Engine) -> None:
    # Reads open a plain deferred BEGIN. Writers opened through begin_write()
    # use BEGIN IMMEDIATE: the write lock is held from the first read of a
    # check-then-act sequence until commit.

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.execute("PRAGMA journal_mode = WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        mode = conn.get_execution_options().get(BEGIN_MODE)
        conn.exec_driver_sql(f"BEGIN {mode}" if mode else "BEGIN")


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    url = settings.sqlalchemy_url

    if settings.database_url is None:
        settings.data_dir.mkdir(parents=True, exist_ok=True)

    # echo=True if you want to see SQL printed in the terminal
    engine = create_engine(
        url,
        future=True,
        connect_args={"timeout": settings.busy_timeout},
    )
    if engine.dialect.name == "sqlite":
        _configure_sqlite(engine)
    return engine


def begin_write(engine: Optional[Engine] = None):
    """Open a write transaction that takes the database write lock up front."""
    engine = engine or get_engine()
    return engine.execution_options(**{BEGIN_MODE: "IMMEDIATE"}).begin()
