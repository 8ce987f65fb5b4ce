# src/onthebell/models/migration.py
"""Ledger of one-time data migrations that have already run."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from onthebell.db.session import Base
from onthebell.db.time import utcnow


class MigrationRecord(Base):
    """Presence of a row means the named migration has been applied."""

    __tablename__ = "migration_record"

    name: Mapped[str] = mapped_column(String(128), primary_key=True)
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
