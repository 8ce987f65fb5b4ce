"""Admin dashboard counters."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.orm import Session

from onthebell.core.roles import Permission, ensure_authorized
from onthebell.models import ContentReport, Post, User
from onthebell.models.report import (
    REPORT_STATUS_DISMISSED,
    REPORT_STATUS_PENDING,
    REPORT_STATUS_RESOLVED,
)


@dataclass
class AdminStats:
    users: dict[str, int]
    posts: dict[str, int]
    reports: dict[str, int]


def _count(db: Session, model: type, *criteria: object) -> int:
    return db.query(func.count()).select_from(model).filter(*criteria).scalar() or 0


def get_admin_stats(db: Session, admin: User) -> AdminStats:
    """Return user, post and report counters for the dashboard."""
    ensure_authorized(admin, Permission.view_analytics)
    return AdminStats(
        users={
            "total": _count(db, User),
            "verified": _count(db, User, User.is_verified.is_(True)),
            "suspended": _count(db, User, User.is_suspended.is_(True)),
        },
        posts={
            "total": _count(db, Post),
            "active": _count(db, Post, Post.is_hidden.is_(False), Post.is_deleted.is_(False)),
            "hidden": _count(db, Post, Post.is_hidden.is_(True)),
            "removed": _count(db, Post, Post.is_deleted.is_(True)),
        },
        reports={
            "pending": _count(db, ContentReport, ContentReport.status == REPORT_STATUS_PENDING),
            "resolved": _count(db, ContentReport, ContentReport.status == REPORT_STATUS_RESOLVED),
            "dismissed": _count(db, ContentReport, ContentReport.status == REPORT_STATUS_DISMISSED),
        },
    )
