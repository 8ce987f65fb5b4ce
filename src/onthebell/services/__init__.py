# src/onthebell/services/__init__.py
"""Business logic services for the OnTheBell application."""

from .notifications import (
    NotificationHub,
    filter_notifications_by_preferences,
    get_notification_hub,
)
from .storage import DocumentStorage, LocalDocumentStorage, get_document_storage

__all__ = [
    "DocumentStorage",
    "LocalDocumentStorage",
    "NotificationHub",
    "filter_notifications_by_preferences",
    "get_document_storage",
    "get_notification_hub",
]
