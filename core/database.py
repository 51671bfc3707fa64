"""
core/database.py -- Shared SQLAlchemy engine and schema metadata.

One Engine (and its connection pool) is created per process by the API
lifespan and injected into every store. Stores register their tables on the
shared `metadata` object and check out a connection per operation.

Lifecycle:
    engine = create_db_engine(settings.database_url)
    ping(engine)            # startup -- raise if the database is unreachable
    ...
    engine.dispose()        # shutdown

Layer rule: no imports from api/, auth/ or media/.
"""

from __future__ import annotations

from sqlalchemy import MetaData, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

metadata = MetaData()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_db_engine(db_url: str) -> Engine:
    """Build the process-wide Engine for db_url.

    SQLite needs check_same_thread=False because FastAPI runs sync handlers
    on a thread pool and pooled connections move between threads.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def ping(engine: Engine) -> None:
    """Run a trivial query. Raises SQLAlchemyError when the database is unreachable."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def is_healthy(engine: Engine) -> bool:
    """Soft variant of ping() for the health endpoint."""
    try:
        ping(engine)
    except SQLAlchemyError:
        return False
    return True
