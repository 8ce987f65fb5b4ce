"""Notification-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime

from .common import CamelModel


class NotificationResponse(CamelModel):
    """Schema for a notification returned to its recipient."""

    id: str
    user_id: str
    type: str
    title: str
    message: str
    is_read: bool
    action_url: str | None
    post_category: str | None
    actor_id: str | None
    created_at: datetime


class NotificationListResponse(CamelModel):
    """Preference-filtered notifications and their unread count."""

    notifications: list[NotificationResponse]
    unread_count: int
