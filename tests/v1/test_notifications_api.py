# tests/v1/test_notifications_api.py
"""Tests for the notification inbox endpoints."""

import json

from fastapi import status

from onthebell.services.notifications import (
    NotificationHub,
    create_notification,
    get_notification_hub,
)


class ReplayHub(NotificationHub):
    """Hub that replays queued notifications to a new subscriber, then closes it."""

    def __init__(self, replay) -> None:
        super().__init__()
        self.replay = replay
        self.subscribed: list[str] = []

    def subscribe(self, user_id, preferences=None):
        subscription = super().subscribe(user_id, preferences)
        self.subscribed.append(user_id)
        for notification in self.replay:
            self.publish(notification)
        subscription.unsubscribe()
        return subscription


def _events(body: str) -> list[dict]:
    return [
        json.loads(line.removeprefix("data: "))
        for line in body.splitlines()
        if line.startswith("data: ")
    ]


def test_inbox_respects_preferences(client, auth_token, test_user, db_session) -> None:
    test_user.notification_preferences = {"newPosts": {"deals": False}, "likes": True}
    db_session.commit()
    create_notification(db_session, test_user.id, "new_post", "Deal", "", post_category="deals")
    create_notification(db_session, test_user.id, "like", "Liked", "")

    response = client.get("/api/v1/notifications", headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [n["title"] for n in data["notifications"]] == ["Liked"]
    assert data["unreadCount"] == 1


def test_mark_read(client, auth_token, test_user, db_session) -> None:
    note = create_notification(db_session, test_user.id, "info", "Hello", "")

    response = client.post(f"/api/v1/notifications/{note.id}/read", headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    assert note.is_read is True


def test_mark_read_unknown(client, auth_token) -> None:
    response = client.post("/api/v1/notifications/nope/read", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_mark_all_read(client, auth_token, test_user, db_session) -> None:
    for title in ("a", "b", "c"):
        create_notification(db_session, test_user.id, "info", title, "")

    response = client.post("/api/v1/notifications/read-all", headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "3 notifications marked as read"


def test_stream_sends_new_notifications(app, client, auth_token, test_user, db_session) -> None:
    quiet_hub = NotificationHub()
    note = create_notification(db_session, test_user.id, "info", "Welcome", "Hi", hub=quiet_hub)
    hub = ReplayHub([note])
    app.dependency_overrides[get_notification_hub] = lambda: hub
    try:
        response = client.get("/api/v1/notifications/stream", headers=auth_token)
    finally:
        app.dependency_overrides.pop(get_notification_hub, None)

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.text.startswith(": connected")
    assert "event: notification" in response.text
    events = _events(response.text)
    assert [(e["id"], e["title"], e["userId"]) for e in events] == [(note.id, "Welcome", test_user.id)]
    assert hub.subscribed == [test_user.id]
    assert hub.subscriber_count(test_user.id) == 0


def test_stream_applies_preferences(app, client, auth_token, test_user, db_session) -> None:
    test_user.notification_preferences = {"likes": False}
    db_session.commit()
    quiet_hub = NotificationHub()
    liked = create_notification(db_session, test_user.id, "like", "Liked", "", hub=quiet_hub)
    commented = create_notification(db_session, test_user.id, "comment", "Reply", "", hub=quiet_hub)
    app.dependency_overrides[get_notification_hub] = lambda: ReplayHub([liked, commented])
    try:
        response = client.get("/api/v1/notifications/stream", headers=auth_token)
    finally:
        app.dependency_overrides.pop(get_notification_hub, None)

    assert [e["title"] for e in _events(response.text)] == ["Reply"]


def test_stream_requires_authentication(client) -> None:
    response = client.get("/api/v1/notifications/stream")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
