# tests/services/test_user_moderation.py
"""Tests for admin actions on user accounts."""

from datetime import UTC, datetime, timedelta

import pytest

from onthebell.core.errors import AuthorizationError, NotFoundError, ValidationError
from onthebell.core.roles import Role
from onthebell.models import User
from onthebell.services.user_moderation import (
    apply_user_action,
    delete_user,
    list_users,
    suspend_user,
    unsuspend_user,
    update_role,
    verify_user,
    unverify_user,
)

FIXED_NOW = datetime(2025, 6, 1, 14, 30, 15, tzinfo=UTC)


class TestSuspension:
    def test_suspend_for_seven_days(self, db_session, admin, test_user, mocker) -> None:
        mocker.patch("onthebell.services.user_moderation.utcnow", return_value=FIXED_NOW)

        suspended = suspend_user(db_session, admin, test_user.id, "Spamming", 7)

        assert suspended.is_suspended is True
        assert suspended.suspension_reason == "Spamming"
        assert suspended.suspension_expires_at == FIXED_NOW + timedelta(days=7)
        assert suspended.suspension_expires_at.time() == FIXED_NOW.time()
        assert suspended.role == Role.user.value

    @pytest.mark.parametrize("duration", [None, 0])
    def test_indefinite_suspension(self, db_session, admin, test_user, duration) -> None:
        suspended = suspend_user(db_session, admin, test_user.id, "Abuse", duration)

        assert suspended.is_suspended is True
        assert suspended.suspension_expires_at is None

    def test_suspension_keeps_moderator_role(self, db_session, admin, moderator) -> None:
        suspended = suspend_user(db_session, admin, moderator.id, "Cooling off", 3)
        assert suspended.role == Role.moderator.value

    def test_unsuspend_clears_fields(self, db_session, admin, test_user) -> None:
        suspend_user(db_session, admin, test_user.id, "Spamming", 7)

        restored = unsuspend_user(db_session, admin, test_user.id)

        assert restored.is_suspended is False
        assert restored.suspension_reason is None
        assert restored.suspension_expires_at is None


class TestUpdateRole:
    def test_round_trip_changes_only_given_fields(self, db_session, admin, test_user) -> None:
        before = {
            "email": test_user.email,
            "display_name": test_user.display_name,
            "is_verified": test_user.is_verified,
            "is_suspended": test_user.is_suspended,
        }

        update_role(db_session, admin, test_user.id, role="moderator", permissions=["manage_users"])
        db_session.expire_all()
        reloaded = db_session.get(User, test_user.id)

        assert reloaded.role == "moderator"
        assert reloaded.permissions == ["manage_users"]
        assert {key: getattr(reloaded, key) for key in before} == before

    def test_permissions_only(self, db_session, admin, moderator) -> None:
        updated = update_role(db_session, admin, moderator.id, permissions=["view_analytics"])

        assert updated.role == "moderator"
        assert updated.permissions == ["view_analytics"]

    def test_cannot_assign_role_above_assignable(self, db_session, admin, test_user) -> None:
        with pytest.raises(AuthorizationError):
            update_role(db_session, admin, test_user.id, role="admin")
        assert test_user.role == "user"

    def test_super_admin_can_promote_to_admin(self, db_session, super_admin, test_user) -> None:
        assert update_role(db_session, super_admin, test_user.id, role="admin").role == "admin"

    def test_invalid_role_and_permission(self, db_session, admin, test_user) -> None:
        with pytest.raises(ValidationError):
            update_role(db_session, admin, test_user.id, role="overlord")
        with pytest.raises(ValidationError):
            update_role(db_session, admin, test_user.id, permissions=["fly"])


class TestGuards:
    def test_admin_cannot_manage_admin(self, db_session, admin, make_user) -> None:
        peer = make_user(Role.admin)
        with pytest.raises(AuthorizationError, match="equal or higher role"):
            suspend_user(db_session, admin, peer.id, "no", 1)
        assert peer.is_suspended is False

    def test_moderator_lacks_manage_users(self, db_session, moderator, test_user) -> None:
        with pytest.raises(AuthorizationError, match="Insufficient permissions"):
            suspend_user(db_session, moderator, test_user.id, "no", 1)

    def test_regular_user_denied_before_lookup(self, db_session, test_user) -> None:
        with pytest.raises(AuthorizationError):
            delete_user(db_session, test_user, "missing")

    def test_missing_target(self, db_session, admin) -> None:
        with pytest.raises(NotFoundError):
            verify_user(db_session, admin, "missing")


def test_verify_and_unverify(db_session, admin, test_user) -> None:
    verified = verify_user(db_session, admin, test_user.id)
    assert verified.is_verified is True
    assert verified.verification_status == "approved"
    assert verified.verified_at is not None

    unverified = unverify_user(db_session, admin, test_user.id)
    assert unverified.is_verified is False
    assert unverified.verification_status == "none"
    assert unverified.verified_at is None


def test_delete_user(db_session, admin, test_user) -> None:
    user_id = test_user.id
    delete_user(db_session, admin, user_id)
    assert db_session.get(User, user_id) is None


def test_apply_user_action_dispatch(db_session, admin, test_user) -> None:
    apply_user_action(db_session, admin, test_user.id, "suspend", reason="Spam", duration=2)
    assert test_user.is_suspended is True

    apply_user_action(db_session, admin, test_user.id, "updateRole", role="moderator")
    assert test_user.role == "moderator"

    with pytest.raises(ValidationError, match="Invalid action"):
        apply_user_action(db_session, admin, test_user.id, "promote")


def test_list_users_pagination(db_session, admin, make_user) -> None:
    for _ in range(4):
        make_user()

    first, token = list_users(db_session, admin, limit=3)
    assert len(first) == 3
    assert token == first[-1].id

    rest, next_token = list_users(db_session, admin, limit=3, cursor=token)
    assert next_token is None
    assert {u.id for u in first}.isdisjoint(u.id for u in rest)
    assert len(first) + len(rest) == db_session.query(User).count()
