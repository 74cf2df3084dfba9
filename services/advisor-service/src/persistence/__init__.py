"""Persistence primitives for the advisor service's snapshot store."""

from persistence.database import (
    DEFAULT_DB_FILENAME,
    DEFAULT_DB_PATH,
    SessionLocal,
    build_engine,
    get_database_url,
    get_engine,
    get_session,
    init_db,
)
from persistence.models import AuditEvent, Base, StoredSnapshot
from persistence.repository import MISSING_VERSION, SnapshotAction, SnapshotConflictError, SnapshotRepository

__all__ = [
    "AuditEvent",
    "Base",
    "StoredSnapshot",
    "DEFAULT_DB_FILENAME",
    "DEFAULT_DB_PATH",
    "SessionLocal",
    "MISSING_VERSION",
    "SnapshotAction",
    "SnapshotConflictError",
    "SnapshotRepository",
    "build_engine",
    "get_database_url",
    "get_engine",
    "get_session",
    "init_db",
]
