# src/onthebell/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .dashboard import router as dashboard_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .reports import router as reports_router
from .users import router as users_router
from .verifications import router as verifications_router

__all__ = [
    "admin_router",
    "dashboard_router",
    "notifications_router",
    "posts_router",
    "reports_router",
    "users_router",
    "verifications_router",
]
