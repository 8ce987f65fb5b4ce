"""Admin dashboard schemas."""
from __future__ import annotations

from .common import CamelModel


class UserStats(CamelModel):
    total: int
    verified: int
    suspended: int


class PostStats(CamelModel):
    total: int
    active: int
    hidden: int
    removed: int


class ReportStats(CamelModel):
    pending: int
    resolved: int
    dismissed: int


class AdminStatsResponse(CamelModel):
    """Counters shown on the admin dashboard."""

    users: UserStats
    posts: PostStats
    reports: ReportStats
