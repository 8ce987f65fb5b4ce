"""Notification endpoints for the current user."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Query, Request
from fastapi.responses import StreamingResponse

from onthebell.api.v1.dependencies import CurrentUserDep, HubDep, SessionDep
from onthebell.core.settings import settings
from onthebell.schemas.common import ActionResponse
from onthebell.schemas.notification import NotificationListResponse, NotificationResponse
from onthebell.services import notifications as notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def get_notifications(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int = Query(50, ge=1, le=200),
) -> NotificationListResponse:
    """Return notifications allowed by the user's preferences, newest first."""
    notifications, unread = notification_service.list_notifications(db, current_user, limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=unread,
    )


@router.post("/read-all", response_model=ActionResponse)
async def mark_all_read(current_user: CurrentUserDep, db: SessionDep) -> ActionResponse:
    count = notification_service.mark_all_as_read(db, current_user)
    return ActionResponse(message=f"{count} notifications marked as read")


@router.post("/{notification_id}/read", response_model=ActionResponse)
async def mark_read(
    notification_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ActionResponse:
    notification_service.mark_as_read(db, current_user, notification_id)
    return ActionResponse(message="Notification marked as read")


@router.get("/stream")
async def stream_notifications(
    request: Request,
    current_user: CurrentUserDep,
    hub: HubDep,
) -> StreamingResponse:
    """Stream the user's new notifications as server-sent events.

    Each notification is sent as a ``notification`` event whose data is the
    camelCase notification body. Comment lines keep idle connections open.
    """
    subscription = hub.subscribe(current_user.id, current_user.notification_preferences)
    keepalive = settings.notification_stream_keepalive_seconds

    async def event_generator() -> AsyncIterator[str]:
        try:
            yield ": connected\n\n"
            while True:
                try:
                    snapshot = await asyncio.wait_for(subscription.get(), timeout=keepalive)
                except asyncio.TimeoutError:
                    if await request.is_disconnected():
                        break
                    yield ": keep-alive\n\n"
                    continue
                if snapshot is None:
                    break
                yield f"event: notification\ndata: {snapshot.model_dump_json(by_alias=True)}\n\n"
        finally:
            subscription.unsubscribe()
            logger.debug("Closed notification stream for user %s", current_user.id)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
