"""Notification creation, preference filtering and live delivery."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol, TypeVar

from sqlalchemy.orm import Session

from onthebell.core.errors import NotFoundError
from onthebell.models import Notification, Post, User
from onthebell.models.post import POST_CATEGORIES, VISIBILITY_VERIFIED_ONLY
from onthebell.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)

NOTIFICATION_TYPE_NEW_POST = "new_post"
NOTIFICATION_TYPE_LIKE = "like"
NOTIFICATION_TYPE_COMMENT = "comment"
NOTIFICATION_TYPE_FOLLOW = "follow"
NOTIFICATION_TYPE_INFO = "info"

# Preference key gating each social notification type.
_TYPE_PREFERENCE_KEYS = {
    NOTIFICATION_TYPE_LIKE: "likes",
    NOTIFICATION_TYPE_COMMENT: "comments",
    NOTIFICATION_TYPE_FOLLOW: "follows",
}


class Filterable(Protocol):
    type: str
    post_category: str | None


N = TypeVar("N", bound=Filterable)

_CLOSED = object()


def default_notification_preferences() -> dict[str, Any]:
    """Return preferences with every category and flag enabled."""
    return {
        "newPosts": {category: True for category in POST_CATEGORIES},
        "likes": True,
        "comments": True,
        "follows": True,
    }


def is_notification_allowed(
    notification: Filterable,
    prefs: Mapping[str, Any] | None,
) -> bool:
    """Decide whether a single notification passes ``prefs``.

    Absent preferences, categories and flags all default to visible.
    """
    if not prefs:
        return True
    if notification.type == NOTIFICATION_TYPE_NEW_POST and notification.post_category:
        new_posts = prefs.get("newPosts") or {}
        return new_posts.get(notification.post_category) is not False
    key = _TYPE_PREFERENCE_KEYS.get(notification.type)
    if key is None:
        return True
    return prefs.get(key) is not False


def filter_notifications_by_preferences(
    notifications: Sequence[N],
    prefs: Mapping[str, Any] | None,
) -> list[N]:
    """Return the notifications ``prefs`` lets through, in their original order."""
    if prefs is None:
        return list(notifications)
    return [n for n in notifications if is_notification_allowed(n, prefs)]


class Subscription:
    """Stream of notification snapshots for one recipient.

    Iterate with ``async for`` or call :meth:`get`; call :meth:`unsubscribe`
    to stop delivery. Snapshots arrive in publication order, and pending
    readers wake up once the subscription is closed.
    """

    def __init__(
        self,
        hub: NotificationHub,
        user_id: str,
        preferences: Mapping[str, Any] | None = None,
    ) -> None:
        self.user_id = user_id
        self.preferences = preferences
        self._hub = hub
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        try:
            self._loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
        self.active = True
        self._closed = False
        self._close_queued = False

    def _put(self, item: Any) -> None:
        if item is _CLOSED:
            self._close_queued = True
        self._queue.put_nowait(item)

    def _enqueue(self, item: Any) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            self._put(item)
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._put(item)
        else:
            # Publishers may run in the threadpool used for sync endpoints.
            loop.call_soon_threadsafe(self._put, item)

    def deliver(self, snapshot: NotificationResponse) -> bool:
        """Queue ``snapshot`` if it passes this subscription's preferences."""
        if not self.active or not is_notification_allowed(snapshot, self.preferences):
            return False
        self._enqueue(snapshot)
        return True

    def pending(self) -> int:
        return self._queue.qsize() - int(self._close_queued)

    async def get(self) -> NotificationResponse | None:
        """Wait for the next snapshot; ``None`` once unsubscribed and drained."""
        if self._closed and self._queue.empty():
            return None
        item = await self._queue.get()
        if item is _CLOSED:
            self._close_queued = False
            return None
        return item

    def get_nowait(self) -> NotificationResponse | None:
        """Return the next queued snapshot.

        Raises:
            asyncio.QueueEmpty: If nothing is queued and the subscription is open.
        """
        if self._closed and self._queue.empty():
            return None
        item = self._queue.get_nowait()
        if item is _CLOSED:
            self._close_queued = False
            return None
        return item

    def unsubscribe(self) -> None:
        """Stop delivery and wake any reader waiting on this subscription."""
        if not self.active:
            return
        self.active = False
        self._hub.remove(self)
        self._enqueue(_CLOSED)
        self._closed = True

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> NotificationResponse:
        snapshot = await self.get()
        if snapshot is None:
            raise StopAsyncIteration
        return snapshot


class NotificationHub:
    """In-process fan-out of newly created notifications to subscribers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[str, set[Subscription]] = defaultdict(set)

    def subscribe(
        self,
        user_id: str,
        preferences: Mapping[str, Any] | None = None,
    ) -> Subscription:
        subscription = Subscription(self, user_id, preferences)
        with self._lock:
            self._subscribers[user_id].add(subscription)
        return subscription

    def remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.user_id)
            if subscribers is None:
                return
            subscribers.discard(subscription)
            if not subscribers:
                del self._subscribers[subscription.user_id]

    def subscriber_count(self, user_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(user_id, ()))

    def publish(self, notification: Notification | NotificationResponse) -> int:
        """Deliver ``notification`` to its recipient's subscribers.

        Returns:
            Number of subscriptions the snapshot was queued on.
        """
        snapshot = NotificationResponse.model_validate(notification)
        with self._lock:
            targets = list(self._subscribers.get(snapshot.user_id, ()))
        return sum(1 for subscription in targets if subscription.deliver(snapshot))


notification_hub = NotificationHub()


def get_notification_hub() -> NotificationHub:
    """Return the process-wide notification hub."""
    return notification_hub


def create_notification(
    db: Session,
    user_id: str,
    type: str,
    title: str,
    message: str,
    *,
    action_url: str | None = None,
    post_category: str | None = None,
    actor_id: str | None = None,
    hub: NotificationHub | None = None,
) -> Notification:
    """Persist a notification, commit it and publish it to live subscribers."""
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        is_read=False,
        action_url=action_url,
        post_category=post_category,
        actor_id=actor_id,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)

    (hub or notification_hub).publish(notification)
    return notification


def notify_new_post(
    db: Session,
    post: Post,
    author_name: str,
    hub: NotificationHub | None = None,
) -> list[Notification]:
    """Notify every user who opted in to ``post.category``.

    The author is never notified about their own post, and ``verified_only``
    posts only reach verified users.
    """
    if not post.category:
        logger.warning("Post %s has no category, skipping notifications", post.id)
        return []

    created: list[Notification] = []
    candidates = db.query(User).filter(User.notification_preferences.is_not(None)).all()
    for user in candidates:
        if user.id == post.author_id:
            continue
        new_posts = (user.notification_preferences or {}).get("newPosts") or {}
        if new_posts.get(post.category) is not True:
            continue
        if post.visibility == VISIBILITY_VERIFIED_ONLY and not user.is_verified:
            continue
        notification = Notification(
            user_id=user.id,
            type=NOTIFICATION_TYPE_NEW_POST,
            title="New post",
            message=f"{author_name} posted a new {post.category} post: {post.title}",
            post_category=post.category,
            actor_id=post.author_id,
            action_url=f"/community/{post.id}",
        )
        db.add(notification)
        created.append(notification)

    if not created:
        return created

    db.commit()
    publisher = hub or notification_hub
    for notification in created:
        db.refresh(notification)
        publisher.publish(notification)
    logger.info("Created %d new_post notifications for post %s", len(created), post.id)
    return created


def list_notifications(
    db: Session,
    user: User,
    limit: int = 50,
) -> tuple[list[Notification], int]:
    """Return the user's visible notifications, newest first, and the unread count."""
    notifications = (
        db.query(Notification)
        .filter(Notification.user_id == user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )
    visible = filter_notifications_by_preferences(notifications, user.notification_preferences)
    unread = sum(1 for notification in visible if not notification.is_read)
    return visible, unread


def mark_as_read(db: Session, user: User, notification_id: str) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user.id)
        .first()
    )
    if notification is None:
        raise NotFoundError("Notification not found")
    if not notification.is_read:
        notification.is_read = True
        db.commit()
    return notification


def mark_all_as_read(db: Session, user: User) -> int:
    """Mark every unread notification of ``user`` as read; return how many changed."""
    unread: Iterable[Notification] = (
        db.query(Notification)
        .filter(Notification.user_id == user.id, Notification.is_read.is_(False))
        .all()
    )
    count = 0
    for notification in unread:
        notification.is_read = True
        count += 1
    if count:
        db.commit()
    return count
