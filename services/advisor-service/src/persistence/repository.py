"""Snapshot store data access helpers."""

from __future__ import annotations

from enum import Enum
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from persistence.models import AuditEvent, StoredSnapshot

# Version reported for keys that have never been written.
MISSING_VERSION = 0


class SnapshotAction(str, Enum):
    """Mutations recorded in the audit trail."""

    INCOME_CONFIGURED = "income_configured"
    EXPENSE_ADDED = "expense_added"
    EXPENSE_REMOVED = "expense_removed"
    GOAL_ADDED = "goal_added"
    GOAL_AMOUNT_UPDATED = "goal_amount_updated"
    GOAL_REMOVED = "goal_removed"
    SAMPLE_LOADED = "sample_loaded"


class SnapshotConflictError(RuntimeError):
    """Raised when a snapshot changed between being read and being saved."""

    def __init__(self, key: str, expected_version: int):
        super().__init__(f"Snapshot was modified after version {expected_version} was read; reload and retry.")
        self.key = key
        self.expected_version = expected_version


class SnapshotRepository:
    """Thin repository that reads and writes versioned snapshot blobs by key."""

    def __init__(self, db: Session):
        self._db = db

    def get_payload(self, key: str) -> dict[str, Any] | None:
        payload, _ = self.load(key)
        return payload

    def load(self, key: str) -> tuple[dict[str, Any] | None, int]:
        """Return the stored blob and its version (`MISSING_VERSION` when absent)."""
        record = self._db.get(StoredSnapshot, key, populate_existing=True)
        if record is None:
            return None, MISSING_VERSION
        return record.payload, record.version

    def save_payload(
        self,
        key: str,
        payload: dict[str, Any],
        *,
        expected_version: int,
        action: SnapshotAction,
        entry_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> int:
        """
        Replace the blob under `key` if it is still at `expected_version`, record why
        it changed, and return the new version.

        Raises:
            SnapshotConflictError: another writer saved the key after it was read.
        """
        new_version = expected_version + 1
        if expected_version == MISSING_VERSION:
            self._db.add(StoredSnapshot(key=key, payload=payload, version=new_version))
            try:
                self._db.flush()
            except IntegrityError as exc:
                self._db.rollback()
                raise SnapshotConflictError(key, expected_version) from exc
        else:
            result = self._db.execute(
                update(StoredSnapshot)
                .where(StoredSnapshot.key == key, StoredSnapshot.version == expected_version)
                .values(payload=payload, version=new_version)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self._db.rollback()
                raise SnapshotConflictError(key, expected_version)

        self._record_event(key=key, action=action, entry_id=entry_id, details=details)
        self._db.commit()
        return new_version

    def list_events(self, key: str) -> list[AuditEvent]:
        return (
            self._db.query(AuditEvent)
            .filter(AuditEvent.snapshot_key == key)
            .order_by(AuditEvent.id)
            .all()
        )

    def last_event(self, key: str, action: SnapshotAction) -> AuditEvent | None:
        return (
            self._db.query(AuditEvent)
            .filter(AuditEvent.snapshot_key == key, AuditEvent.action == action.value)
            .order_by(AuditEvent.id.desc())
            .first()
        )

    def _record_event(
        self,
        *,
        key: str,
        action: SnapshotAction,
        entry_id: str | None,
        details: dict[str, Any] | None,
    ) -> None:
        event = AuditEvent(
            snapshot_key=key,
            action=action.value,
            entry_id=entry_id,
            details=details,
        )
        self._db.add(event)
