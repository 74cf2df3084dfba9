"""SQLAlchemy models for stored budget snapshots and their audit trail."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class StoredSnapshot(Base):
    """JSON blob of a household's income, expenses, and goals under an opaque key."""

    __tablename__ = "budget_snapshots"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    payload: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    # Bumped on every write; writers must present the version they read.
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    audit_events: Mapped[List["AuditEvent"]] = relationship(
        back_populates="snapshot",
        cascade="all, delete-orphan",
        order_by="AuditEvent.id",
    )


class AuditEvent(Base):
    """Records each mutation applied to a stored snapshot."""

    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    snapshot_key: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("budget_snapshots.key", ondelete="CASCADE"),
        nullable=False,
    )
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    entry_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    details: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    snapshot: Mapped["StoredSnapshot"] = relationship(back_populates="audit_events")
