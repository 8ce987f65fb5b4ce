"""Admin profile endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from onthebell.api.v1.dependencies import CurrentUserDep
from onthebell.core.roles import (
    Permission,
    ensure_authorized,
    format_permission_name,
    format_role_name,
    get_assignable_roles,
    get_user_permissions,
    has_permission,
)
from onthebell.schemas.user import AdminPermissionsResponse, AdminProfileResponse

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/me", response_model=AdminProfileResponse)
async def get_admin_profile(current_user: CurrentUserDep) -> AdminProfileResponse:
    """Return the caller's admin role, permission flags and display names."""
    ensure_authorized(current_user)
    granted = [p for p in Permission if has_permission(current_user, p)]
    return AdminProfileResponse(
        id=current_user.id,
        role=current_user.role,
        role_name=format_role_name(current_user.role),
        permissions=AdminPermissionsResponse.model_validate(get_user_permissions(current_user)),
        permission_names=[format_permission_name(p) for p in granted],
        assignable_roles=[role.value for role in get_assignable_roles(current_user)],
    )
