"""
Engine and session wiring for the snapshot store.

The store defaults to a SQLite file next to the service (`data/advisor.db`); point
ADVISOR_DB_URL at another database to share snapshots between instances.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from shared.settings import DB_URL_ENV

DEFAULT_DB_FILENAME = "advisor.db"
DEFAULT_DB_PATH = Path(__file__).resolve().parents[2] / "data" / DEFAULT_DB_FILENAME

_engine: Engine | None = None


def get_database_url() -> str:
    configured = (os.getenv(DB_URL_ENV) or "").strip()
    return configured or f"sqlite:///{DEFAULT_DB_PATH}"


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for `database_url`.

    For file-backed SQLite the parent directory is created first, connections may be
    shared across FastAPI's worker threads, and foreign keys are enforced so removing
    a snapshot also removes its audit trail.
    """
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return create_engine(database_url, future=True)

    if url.database and url.database != ":memory:":
        db_file = Path(url.database)
        if not db_file.is_absolute():
            db_file = Path.cwd() / db_file
        db_file.resolve().parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(database_url, future=True, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def get_engine() -> Engine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = build_engine(get_database_url())
    return _engine


SessionLocal = sessionmaker(
    bind=get_engine(),
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    future=True,
)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def init_db() -> None:
    """Create the snapshot and audit tables if they do not exist yet."""
    from persistence.models import Base

    Base.metadata.create_all(bind=get_engine())
