# src/onthebell/models/verification.py
"""Models for address verification requests."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from onthebell.db.session import Base, new_id
from onthebell.db.time import utcnow

VERIFICATION_METHOD_DOCUMENT = "document"
VERIFICATION_METHOD_POSTAL = "postal"
VERIFICATION_METHOD_OTHER = "other"
VERIFICATION_METHODS = (
    VERIFICATION_METHOD_DOCUMENT,
    VERIFICATION_METHOD_POSTAL,
    VERIFICATION_METHOD_OTHER,
)

REQUEST_STATUS_PENDING = "pending"
REQUEST_STATUS_APPROVED = "approved"
REQUEST_STATUS_REJECTED = "rejected"


class VerificationRequest(Base):
    """State machine over a request: pending -> approved | rejected."""

    __tablename__ = "verification_request"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    method: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=REQUEST_STATUS_PENDING,
        index=True,
    )

    # {"street", "suburb", "postcode", "state", "country"}
    address: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Storage reference; cleared once the document has been deleted.
    proof_document: Mapped[str | None] = mapped_column(Text, nullable=True)
    document_deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    postal_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    postal_code_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(32), nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
