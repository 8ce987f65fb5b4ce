"""Admin dashboard endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from onthebell.api.v1.dependencies import CurrentUserDep, SessionDep
from onthebell.schemas.dashboard import AdminStatsResponse
from onthebell.services.dashboard import get_admin_stats

router = APIRouter(prefix="/admin/dashboard", tags=["admin"])


@router.get("", response_model=AdminStatsResponse)
async def get_dashboard(current_user: CurrentUserDep, db: SessionDep) -> AdminStatsResponse:
    """Return moderation counters for the admin dashboard."""
    stats = get_admin_stats(db, current_user)
    return AdminStatsResponse.model_validate(
        {"users": stats.users, "posts": stats.posts, "reports": stats.reports}
    )
