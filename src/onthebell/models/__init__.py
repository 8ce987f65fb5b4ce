"""SQLAlchemy models for the OnTheBell application."""

from .migration import MigrationRecord
from .notification import Notification
from .post import Comment, Post
from .report import ContentReport
from .user import User
from .verification import VerificationRequest

__all__ = [
    "MigrationRecord",
    "Notification",
    "Comment", "Post",
    "ContentReport",
    "User",
    "VerificationRequest",
]
