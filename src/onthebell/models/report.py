# src/onthebell/models/report.py
"""Models tracking user-submitted content reports."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from onthebell.db.session import Base, new_id
from onthebell.db.time import utcnow

REPORT_STATUS_PENDING = "pending"
REPORT_STATUS_RESOLVED = "resolved"
REPORT_STATUS_DISMISSED = "dismissed"

CONTENT_TYPE_POST = "post"
CONTENT_TYPE_COMMENT = "comment"
CONTENT_TYPE_USER = "user"

REPORT_REASONS = (
    "spam",
    "harassment",
    "hate_speech",
    "violence",
    "sexual_content",
    "misinformation",
    "inappropriate_content",
    "scam",
    "copyright_violation",
    "other",
)

MODERATION_ACTIONS = (
    "no_action",
    "content_removed",
    "content_hidden",
    "content_edited",
    "user_warned",
    "user_suspended",
    "user_banned",
    "approve",
    "reject",
    "dismiss",
)


class ContentReport(Base):
    """State machine over a single report: pending -> resolved | dismissed."""

    __tablename__ = "content_report"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    reporter_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    reporter_name: Mapped[str | None] = mapped_column(Text, nullable=True)

    content_type: Mapped[str] = mapped_column(String(16), nullable=False)
    content_id: Mapped[str] = mapped_column(String(32), nullable=False)
    # For user reports this is the reported account itself.
    content_author_id: Mapped[str] = mapped_column(String(32), nullable=False)

    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    custom_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Terminal once it leaves pending.
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=REPORT_STATUS_PENDING,
        index=True,
    )
    moderation_action: Mapped[str | None] = mapped_column(String(32), nullable=True)
    moderation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    moderated_by: Mapped[str | None] = mapped_column(String(32), nullable=True)
    moderated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
