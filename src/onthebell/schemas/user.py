"""User-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from .common import CamelModel

UserRole = Literal["user", "moderator", "admin", "super_admin"]
UserAction = Literal["updateRole", "suspend", "unsuspend", "verify", "unverify"]


class UserUpdate(CamelModel):
    """Schema for the admin ``PUT users`` action dispatch."""

    user_id: str = Field(..., min_length=1)
    action: UserAction
    role: UserRole | None = None
    permissions: list[str] | None = None
    reason: str | None = Field(None, max_length=1000)
    duration: int | None = Field(None, ge=0, description="Suspension length in days")


class UserResponse(CamelModel):
    """Schema for user information returned to administrators."""

    id: str
    email: str
    display_name: str | None
    role: UserRole
    permissions: list[str]
    is_verified: bool
    verification_status: str
    is_suspended: bool
    suspension_reason: str | None
    suspension_expires_at: datetime | None
    notification_preferences: dict[str, Any] | None
    joined_at: datetime


class UserPageResponse(CamelModel):
    users: list[UserResponse]
    next_page_token: str | None
    has_more: bool


class AdminPermissionsResponse(CamelModel):
    """Permission flags driving the admin panel navigation."""

    can_manage_posts: bool
    can_manage_users: bool
    can_manage_reports: bool
    can_manage_events: bool
    can_manage_businesses: bool
    can_view_analytics: bool
    can_manage_moderators: bool


class AdminProfileResponse(CamelModel):
    """The acting administrator's role and effective permissions."""

    id: str
    role: UserRole
    role_name: str
    permissions: AdminPermissionsResponse
    permission_names: list[str]
    assignable_roles: list[UserRole]
