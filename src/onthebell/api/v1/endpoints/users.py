"""Admin user management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from onthebell.api.v1.dependencies import CurrentUserDep, SessionDep
from onthebell.schemas.common import ActionResponse
from onthebell.schemas.user import UserPageResponse, UserResponse, UserUpdate
from onthebell.services import user_moderation

router = APIRouter(prefix="/admin/users", tags=["admin", "users"])


@router.get("", response_model=UserPageResponse)
async def get_users(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int | None = Query(None, ge=1),
    next_page_token: str | None = Query(None, alias="nextPageToken"),
) -> UserPageResponse:
    """List user accounts for the admin panel."""
    users, token = user_moderation.list_users(db, current_user, limit=limit, cursor=next_page_token)
    return UserPageResponse(
        users=[UserResponse.model_validate(user) for user in users],
        next_page_token=token,
        has_more=token is not None,
    )


@router.put("", response_model=ActionResponse)
async def update_user(
    payload: UserUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ActionResponse:
    """Change role, suspension or verification of a user."""
    fields = payload.model_dump(exclude={"user_id", "action"}, exclude_none=True)
    user_moderation.apply_user_action(
        db,
        current_user,
        payload.user_id,
        payload.action,
        **fields,
    )
    return ActionResponse(message=f"User {payload.action} completed successfully")


@router.delete("", response_model=ActionResponse)
async def delete_user(
    current_user: CurrentUserDep,
    db: SessionDep,
    user_id: str = Query(..., alias="userId", min_length=1),
) -> ActionResponse:
    """Permanently delete a user account."""
    user_moderation.delete_user(db, current_user, user_id)
    return ActionResponse(message="User deleted successfully")
