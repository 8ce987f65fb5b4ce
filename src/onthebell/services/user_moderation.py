"""Admin-driven mutations on user accounts."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from sqlalchemy.orm import Session

from onthebell.core.errors import AuthorizationError, NotFoundError, ValidationError
from onthebell.core.roles import (
    Permission,
    Role,
    ensure_authorized,
    get_assignable_roles,
    normalize_permissions,
)
from onthebell.core.settings import settings
from onthebell.db.time import utcnow
from onthebell.models import User
from onthebell.models.user import VERIFICATION_STATUS_APPROVED, VERIFICATION_STATUS_NONE

logger = logging.getLogger(__name__)

USER_ACTIONS = ("updateRole", "suspend", "unsuspend", "verify", "unverify")


def _load_managed_user(db: Session, admin: User, target_id: str) -> User:
    """Return the target user once the admin guard has allowed the action."""
    ensure_authorized(admin, Permission.manage_users)
    target = db.get(User, target_id)
    if target is None:
        raise NotFoundError("User not found")
    ensure_authorized(admin, Permission.manage_users, target)
    return target


def list_users(
    db: Session,
    admin: User,
    limit: int | None = None,
    cursor: str | None = None,
) -> tuple[list[User], str | None]:
    """Return a page of users ordered by id and the token for the next page."""
    ensure_authorized(admin, Permission.manage_users)
    page_size = min(limit or settings.users_page_size, settings.max_page_size)
    query = db.query(User)
    if cursor:
        query = query.filter(User.id > cursor)
    rows = query.order_by(User.id).limit(page_size + 1).all()
    users = rows[:page_size]
    next_token = users[-1].id if len(rows) > page_size else None
    return users, next_token


def update_role(
    db: Session,
    admin: User,
    target_id: str,
    role: str | None = None,
    permissions: Sequence[str] | None = None,
) -> User:
    """Overwrite the target's role and/or extra permissions.

    Only the fields passed are changed. The new role must be one the admin
    is allowed to assign.
    """
    target = _load_managed_user(db, admin, target_id)

    if role is not None:
        try:
            new_role = Role(role)
        except ValueError as err:
            raise ValidationError("Invalid role") from err
        if new_role not in get_assignable_roles(admin):
            raise AuthorizationError(f"Cannot assign role '{new_role.value}'")
    if permissions is not None:
        try:
            cleaned = normalize_permissions(permissions)
        except ValueError as err:
            raise ValidationError("Invalid permission") from err

    if role is not None:
        target.role = new_role.value
    if permissions is not None:
        target.permissions = cleaned
    db.commit()
    logger.info("User %s role updated by %s (role=%s)", target.id, admin.id, target.role)
    return target


def suspend_user(
    db: Session,
    admin: User,
    target_id: str,
    reason: str | None,
    duration_days: int | None = None,
) -> User:
    """Suspend the target; a positive duration sets an expiry, otherwise indefinite."""
    target = _load_managed_user(db, admin, target_id)
    target.is_suspended = True
    target.suspension_reason = reason
    if duration_days and duration_days > 0:
        target.suspension_expires_at = utcnow() + timedelta(days=duration_days)
    else:
        target.suspension_expires_at = None
    db.commit()
    logger.info("User %s suspended by %s", target.id, admin.id)
    return target


def unsuspend_user(db: Session, admin: User, target_id: str) -> User:
    target = _load_managed_user(db, admin, target_id)
    target.is_suspended = False
    target.suspension_reason = None
    target.suspension_expires_at = None
    db.commit()
    logger.info("User %s unsuspended by %s", target.id, admin.id)
    return target


def verify_user(db: Session, admin: User, target_id: str) -> User:
    """Mark the target verified, bypassing the verification request flow."""
    target = _load_managed_user(db, admin, target_id)
    target.is_verified = True
    target.verification_status = VERIFICATION_STATUS_APPROVED
    target.verified_at = utcnow()
    db.commit()
    return target


def unverify_user(db: Session, admin: User, target_id: str) -> User:
    target = _load_managed_user(db, admin, target_id)
    target.is_verified = False
    target.verification_status = VERIFICATION_STATUS_NONE
    target.verified_at = None
    db.commit()
    return target


def delete_user(db: Session, admin: User, target_id: str) -> None:
    """Permanently remove the target's account record."""
    target = _load_managed_user(db, admin, target_id)
    db.delete(target)
    db.commit()
    logger.warning("User %s permanently deleted by %s", target_id, admin.id)


def apply_user_action(
    db: Session,
    admin: User,
    target_id: str,
    action: str,
    **fields: Any,
) -> User:
    """Dispatch one of :data:`USER_ACTIONS` on behalf of the ``PUT users`` handler."""
    if action == "updateRole":
        return update_role(
            db,
            admin,
            target_id,
            role=fields.get("role"),
            permissions=fields.get("permissions"),
        )
    if action == "suspend":
        return suspend_user(
            db,
            admin,
            target_id,
            fields.get("reason"),
            fields.get("duration"),
        )
    if action == "unsuspend":
        return unsuspend_user(db, admin, target_id)
    if action == "verify":
        return verify_user(db, admin, target_id)
    if action == "unverify":
        return unverify_user(db, admin, target_id)
    raise ValidationError("Invalid action")
