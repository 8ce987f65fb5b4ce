"""Admin post moderation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from onthebell.api.v1.dependencies import CurrentUserDep, SessionDep
from onthebell.schemas.common import ActionResponse
from onthebell.schemas.post import PostModerate, PostPageResponse, PostResponse
from onthebell.services import posts as post_service

router = APIRouter(prefix="/admin/posts", tags=["admin", "posts"])

_ACTION_PAST_TENSE = {"hide": "hidden", "restore": "restored", "delete": "deleted"}


@router.get("", response_model=PostPageResponse)
async def get_posts(
    current_user: CurrentUserDep,
    db: SessionDep,
    post_status: str | None = Query(None, alias="status"),
    author_id: str | None = Query(None, alias="authorId"),
    limit: int | None = Query(None, ge=1),
    start_after: str | None = Query(None, alias="startAfter"),
) -> PostPageResponse:
    """List posts with optional status and author filters."""
    posts, has_more = post_service.list_posts(
        db,
        current_user,
        status=post_status,
        author_id=author_id,
        limit=limit,
        cursor=start_after,
    )
    return PostPageResponse(
        posts=[PostResponse.model_validate(post) for post in posts],
        has_more=has_more,
        last_id=posts[-1].id if posts else None,
    )


@router.put("", response_model=ActionResponse)
async def moderate_post(
    payload: PostModerate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ActionResponse:
    """Hide, restore or soft-delete a post."""
    post_service.moderate_post(db, current_user, payload.post_id, payload.action, payload.reason)
    return ActionResponse(message=f"Post {_ACTION_PAST_TENSE[payload.action]} successfully")


@router.delete("", response_model=ActionResponse)
async def purge_post(
    current_user: CurrentUserDep,
    db: SessionDep,
    post_id: str = Query(..., alias="postId", min_length=1),
) -> ActionResponse:
    """Permanently delete a post."""
    post_service.purge_post(db, current_user, post_id)
    return ActionResponse(message="Post deleted successfully")
