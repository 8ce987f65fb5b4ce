# src/onthebell/models/user.py
"""SQLAlchemy models for community member accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from onthebell.core.roles import Role
from onthebell.db.session import Base, new_id
from onthebell.db.time import utcnow

VERIFICATION_STATUS_NONE = "none"
VERIFICATION_STATUS_PENDING = "pending"
VERIFICATION_STATUS_APPROVED = "approved"
VERIFICATION_STATUS_REJECTED = "rejected"


class User(Base):
    """A community member, including moderators and administrators."""

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Role implies a fixed permission set; ``permissions`` only adds to it.
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=Role.user.value)
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=VERIFICATION_STATUS_NONE,
    )
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Suspension never touches the role.
    is_suspended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    suspension_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    suspension_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # {"newPosts": {category: bool}, "likes": bool, "comments": bool, "follows": bool}
    notification_preferences: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    @property
    def name(self) -> str:
        """Return the display name, falling back to the email address."""
        return self.display_name or self.email
