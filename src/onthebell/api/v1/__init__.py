# src/onthebell/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    dashboard_router,
    notifications_router,
    posts_router,
    reports_router,
    users_router,
    verifications_router,
)

__all__ = [
    "admin_router",
    "dashboard_router",
    "notifications_router",
    "posts_router",
    "reports_router",
    "users_router",
    "verifications_router",
]
