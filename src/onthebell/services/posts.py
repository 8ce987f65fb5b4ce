"""Admin moderation of community posts."""

from __future__ import annotations

import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from onthebell.core.errors import NotFoundError, ValidationError
from onthebell.core.roles import Permission, ensure_authorized
from onthebell.core.settings import settings
from onthebell.db.time import utcnow
from onthebell.models import Comment, Post, User

logger = logging.getLogger(__name__)

POST_STATUS_FILTERS = ("all", "active", "hidden", "deleted")
POST_ACTIONS = ("hide", "restore", "delete")


def list_posts(
    db: Session,
    admin: User,
    status: str | None = None,
    author_id: str | None = None,
    limit: int | None = None,
    cursor: str | None = None,
) -> tuple[list[Post], bool]:
    """Return a page of posts, newest first, and whether more remain."""
    ensure_authorized(admin, Permission.manage_posts)
    if status is not None and status not in POST_STATUS_FILTERS:
        raise ValidationError("Invalid post status filter")

    page_size = min(limit or settings.posts_page_size, settings.max_page_size)
    query = db.query(Post)
    if status == "active":
        query = query.filter(Post.is_hidden.is_(False), Post.is_deleted.is_(False))
    elif status == "hidden":
        query = query.filter(Post.is_hidden.is_(True))
    elif status == "deleted":
        query = query.filter(Post.is_deleted.is_(True))
    if author_id:
        query = query.filter(Post.author_id == author_id)

    if cursor:
        anchor = db.get(Post, cursor)
        if anchor is not None:
            query = query.filter(
                or_(
                    Post.created_at < anchor.created_at,
                    and_(Post.created_at == anchor.created_at, Post.id < anchor.id),
                )
            )

    rows = query.order_by(Post.created_at.desc(), Post.id.desc()).limit(page_size + 1).all()
    return rows[:page_size], len(rows) > page_size


def moderate_post(
    db: Session,
    admin: User,
    post_id: str,
    action: str,
    reason: str | None = None,
) -> Post:
    """Hide, restore or soft-delete a post and stamp who did it."""
    ensure_authorized(admin, Permission.manage_posts)
    if action not in POST_ACTIONS:
        raise ValidationError("Invalid action")

    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")

    if action == "hide":
        post.is_hidden = True
    elif action == "restore":
        post.is_hidden = False
        post.is_deleted = False
    else:
        post.is_deleted = True
    post.moderated_by = admin.id
    post.moderated_at = utcnow()
    if reason:
        post.moderation_reason = reason
    db.commit()
    logger.info("Post %s %s by %s", post.id, action, admin.id)
    return post


def purge_post(db: Session, admin: User, post_id: str) -> None:
    """Permanently delete a post and its comments."""
    ensure_authorized(admin, Permission.manage_posts)
    post = db.get(Post, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    db.query(Comment).filter(Comment.post_id == post_id).delete(synchronize_session=False)
    db.delete(post)
    db.commit()
    logger.warning("Post %s permanently deleted by %s", post_id, admin.id)
