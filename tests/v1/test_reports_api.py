# tests/v1/test_reports_api.py
"""Tests for report submission and moderation endpoints."""

from fastapi import status

from onthebell.models import ContentReport, Post


def _submit(client, headers, content_id, **extra):
    payload = {"contentType": "post", "contentId": content_id, "reason": "spam", **extra}
    return client.post("/api/v1/reports", json=payload, headers=headers)


def test_submit_report(client, auth_token, test_post, db_session) -> None:
    response = _submit(client, auth_token, test_post.id, description="Fake listing")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    report = db_session.get(ContentReport, data["reportId"])
    assert report is not None
    assert report.status == "pending"


def test_submit_requires_authentication(client, test_post) -> None:
    response = _submit(client, {}, test_post.id)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Authentication required"


def test_invalid_token(client, test_post) -> None:
    response = _submit(client, {"Authorization": "Bearer not-a-jwt"}, test_post.id)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_submit_own_content(client, headers_for, other_user, test_post) -> None:
    response = _submit(client, headers_for(other_user), test_post.id)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Cannot report your own content"


def test_submit_missing_content(client, auth_token) -> None:
    response = _submit(client, auth_token, "missing")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_submit_invalid_reason(client, auth_token, test_post) -> None:
    response = _submit(client, auth_token, test_post.id, reason="boring")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_list_reports_for_moderator(client, auth_token, moderator_token, test_post) -> None:
    for _ in range(3):
        _submit(client, auth_token, test_post.id)

    response = client.get(
        "/api/v1/admin/reports",
        params={"status": "pending", "limit": 2},
        headers=moderator_token,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert len(data["reports"]) == 2
    assert data["hasMore"] is True
    assert data["lastId"] == data["reports"][-1]["id"]
    assert data["reports"][0]["contentAuthorId"] == test_post.author_id

    page_two = client.get(
        "/api/v1/admin/reports",
        params={"limit": 2, "startAfter": data["lastId"]},
        headers=moderator_token,
    ).json()
    assert len(page_two["reports"]) == 1
    assert page_two["hasMore"] is False


def test_list_reports_forbidden_for_members(client, auth_token) -> None:
    response = client.get("/api/v1/admin/reports", headers=auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Admin access required"


def test_resolve_hides_content(client, auth_token, moderator_token, test_post, db_session) -> None:
    report_id = _submit(client, auth_token, test_post.id).json()["reportId"]

    response = client.post(
        "/api/v1/admin/reports/resolve",
        json={"reportId": report_id, "action": "content_hidden", "moderationReason": "Spam"},
        headers=moderator_token,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["success"] is True
    assert db_session.get(ContentReport, report_id).status == "resolved"
    assert db_session.get(Post, test_post.id).is_hidden is True


def test_resolve_twice_conflicts(client, auth_token, moderator_token, test_post) -> None:
    report_id = _submit(client, auth_token, test_post.id).json()["reportId"]
    body = {"reportId": report_id, "action": "dismiss"}

    first = client.post("/api/v1/admin/reports/resolve", json=body, headers=moderator_token)
    second = client.post("/api/v1/admin/reports/resolve", json=body, headers=moderator_token)

    assert first.status_code == status.HTTP_200_OK
    assert second.status_code == status.HTTP_409_CONFLICT


def test_resolve_unknown_report(client, moderator_token) -> None:
    response = client.post(
        "/api/v1/admin/reports/resolve",
        json={"reportId": "missing", "action": "dismiss"},
        headers=moderator_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_resolve_missing_fields(client, moderator_token) -> None:
    response = client.post("/api/v1/admin/reports/resolve", json={}, headers=moderator_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
