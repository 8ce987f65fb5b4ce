"""Post-related Pydantic schemas for the admin panel."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import CamelModel

PostAction = Literal["hide", "restore", "delete"]


class PostModerate(CamelModel):
    """Schema for hiding, restoring or soft-deleting a post."""

    post_id: str = Field(..., min_length=1)
    action: PostAction
    reason: str | None = Field(None, max_length=2000)


class PostResponse(CamelModel):
    """Schema for post information returned to administrators."""

    id: str
    author_id: str
    title: str
    body: str
    category: str
    visibility: str
    is_hidden: bool
    is_deleted: bool
    moderation_reason: str | None
    moderated_by: str | None
    moderated_at: datetime | None
    created_at: datetime


class PostPageResponse(CamelModel):
    posts: list[PostResponse]
    has_more: bool
    last_id: str | None
