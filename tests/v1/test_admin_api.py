# tests/v1/test_admin_api.py
"""Tests for the admin profile endpoint."""

from fastapi import status

from onthebell.core.roles import Role


def test_moderator_profile(client, moderator, moderator_token) -> None:
    response = client.get("/api/v1/admin/me", headers=moderator_token)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id"] == moderator.id
    assert data["role"] == "moderator"
    assert data["roleName"] == "Moderator"
    assert data["permissions"] == {
        "canManagePosts": True,
        "canManageUsers": False,
        "canManageReports": True,
        "canManageEvents": False,
        "canManageBusinesses": False,
        "canViewAnalytics": False,
        "canManageModerators": False,
    }
    assert sorted(data["permissionNames"]) == ["Manage Posts", "Manage Reports"]
    assert data["assignableRoles"] == ["user"]


def test_extra_grants_are_reported(client, make_user, headers_for) -> None:
    moderator = make_user(Role.moderator, permissions=["view_analytics"])

    data = client.get("/api/v1/admin/me", headers=headers_for(moderator)).json()

    assert data["permissions"]["canViewAnalytics"] is True
    assert "View Analytics" in data["permissionNames"]


def test_super_admin_profile(client, super_admin, headers_for) -> None:
    data = client.get("/api/v1/admin/me", headers=headers_for(super_admin)).json()

    assert data["roleName"] == "Super Administrator"
    assert all(data["permissions"].values())
    assert "Manage Moderators" in data["permissionNames"]
    assert data["assignableRoles"] == ["user", "moderator", "admin"]


def test_regular_user_forbidden(client, auth_token) -> None:
    response = client.get("/api/v1/admin/me", headers=auth_token)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"detail": "Admin access required"}


def test_requires_authentication(client) -> None:
    response = client.get("/api/v1/admin/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
