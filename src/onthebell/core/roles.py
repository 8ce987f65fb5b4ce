"""Role-based access control for the admin panel.

Role hierarchy: super_admin > admin > moderator > user

Every role maps to a fixed minimum permission set. A user's ``permissions``
column can only add to that set; suspension never changes either.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from onthebell.core.errors import AuthorizationError


class Role(str, Enum):
    """Coarse privilege tier, totally ordered by :attr:`level`."""

    user = "user"
    moderator = "moderator"
    admin = "admin"
    super_admin = "super_admin"

    @property
    def level(self) -> int:
        return _ROLE_LEVELS[self]


class Permission(str, Enum):
    """Fine-grained capability checked independently of the role tier."""

    manage_posts = "manage_posts"
    manage_users = "manage_users"
    manage_reports = "manage_reports"
    manage_events = "manage_events"
    manage_businesses = "manage_businesses"
    view_analytics = "view_analytics"
    manage_moderators = "manage_moderators"


_ROLE_LEVELS: dict[Role, int] = {
    Role.user: 0,
    Role.moderator: 1,
    Role.admin: 2,
    Role.super_admin: 3,
}

_ADMIN_PERMISSIONS = frozenset(
    {
        Permission.manage_posts,
        Permission.manage_users,
        Permission.manage_reports,
        Permission.manage_events,
        Permission.manage_businesses,
        Permission.view_analytics,
    }
)

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.user: frozenset(),
    Role.moderator: frozenset({Permission.manage_posts, Permission.manage_reports}),
    Role.admin: _ADMIN_PERMISSIONS,
    Role.super_admin: _ADMIN_PERMISSIONS | {Permission.manage_moderators},
}

ADMIN_ROLES = frozenset({Role.moderator, Role.admin, Role.super_admin})

_ASSIGNABLE_ROLES: dict[Role, list[Role]] = {
    Role.super_admin: [Role.user, Role.moderator, Role.admin],
    Role.admin: [Role.user, Role.moderator],
    Role.moderator: [Role.user],
    Role.user: [],
}

_ROLE_NAMES: dict[Role, str] = {
    Role.user: "User",
    Role.moderator: "Moderator",
    Role.admin: "Administrator",
    Role.super_admin: "Super Administrator",
}

_PERMISSION_NAMES: dict[Permission, str] = {
    Permission.manage_posts: "Manage Posts",
    Permission.manage_users: "Manage Users",
    Permission.manage_reports: "Manage Reports",
    Permission.manage_events: "Manage Events",
    Permission.manage_businesses: "Manage Businesses",
    Permission.view_analytics: "View Analytics",
    Permission.manage_moderators: "Manage Moderators",
}


class RoleHolder(Protocol):
    """Anything carrying a role and an extra-permission list (e.g. ``User``)."""

    role: str
    permissions: list[str]


def _coerce_role(role: Role | str) -> Role | None:
    try:
        return Role(role)
    except ValueError:
        return None


def get_role_level(role: Role | str) -> int:
    """Return the hierarchy level of ``role``; unknown roles rank as ``user``."""
    coerced = _coerce_role(role)
    return coerced.level if coerced is not None else 0


def is_higher_role(role1: Role | str, role2: Role | str) -> bool:
    """Return True if ``role1`` strictly outranks ``role2``."""
    return get_role_level(role1) > get_role_level(role2)


def is_admin(user: RoleHolder | None) -> bool:
    """Return True for moderators and above."""
    if user is None:
        return False
    return _coerce_role(user.role) in ADMIN_ROLES


def has_permission(user: RoleHolder | None, permission: Permission | str) -> bool:
    """Check a permission against the role table and the user's extra grants.

    Non-admin users never hold a permission, even if one was granted to them
    explicitly.
    """
    if user is None or not is_admin(user):
        return False
    try:
        permission = Permission(permission)
    except ValueError:
        return False
    if permission in ROLE_PERMISSIONS[Role(user.role)]:
        return True
    return permission.value in (user.permissions or [])


def can_manage_user(admin: RoleHolder | None, target: RoleHolder) -> bool:
    """Return True if ``admin`` may act on ``target``.

    Super admins manage anyone. Admins manage users and moderators only.
    Moderators manage regular users only.
    """
    if admin is None or not is_admin(admin):
        return False
    admin_role = Role(admin.role)
    if admin_role is Role.super_admin:
        return True
    target_role = _coerce_role(target.role)
    if admin_role is Role.admin:
        return target_role in (Role.user, Role.moderator)
    if admin_role is Role.moderator:
        return target_role is Role.user
    return False


def get_assignable_roles(admin: RoleHolder | None) -> list[Role]:
    """Return the roles ``admin`` may hand out, lowest first."""
    if admin is None or not is_admin(admin):
        return []
    return list(_ASSIGNABLE_ROLES[Role(admin.role)])


@dataclass(frozen=True)
class AdminPermissions:
    """Flattened permission flags for the admin panel."""

    can_manage_posts: bool = False
    can_manage_users: bool = False
    can_manage_reports: bool = False
    can_manage_events: bool = False
    can_manage_businesses: bool = False
    can_view_analytics: bool = False
    can_manage_moderators: bool = False


def get_user_permissions(user: RoleHolder | None) -> AdminPermissions:
    """Return every permission flag for ``user``."""
    if user is None or not is_admin(user):
        return AdminPermissions()
    return AdminPermissions(
        can_manage_posts=has_permission(user, Permission.manage_posts),
        can_manage_users=has_permission(user, Permission.manage_users),
        can_manage_reports=has_permission(user, Permission.manage_reports),
        can_manage_events=has_permission(user, Permission.manage_events),
        can_manage_businesses=has_permission(user, Permission.manage_businesses),
        can_view_analytics=has_permission(user, Permission.view_analytics),
        can_manage_moderators=has_permission(user, Permission.manage_moderators),
    )


def format_role_name(role: Role | str) -> str:
    coerced = _coerce_role(role)
    return _ROLE_NAMES[coerced] if coerced is not None else "Unknown"


def format_permission_name(permission: Permission | str) -> str:
    try:
        return _PERMISSION_NAMES[Permission(permission)]
    except ValueError:
        return str(permission)


def normalize_permissions(permissions: Iterable[str]) -> list[str]:
    """Validate and deduplicate a permission list, preserving order.

    Raises:
        ValueError: If an entry is not a known permission.
    """
    seen: list[str] = []
    for permission in permissions:
        value = Permission(permission).value
        if value not in seen:
            seen.append(value)
    return seen


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of :func:`authorize`; falsy when the action is denied."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOWED = AuthorizationResult(allowed=True)


def authorize(
    user: RoleHolder | None,
    permission: Permission | None = None,
    target: RoleHolder | None = None,
) -> AuthorizationResult:
    """Evaluate the admin guard for a state-changing operation.

    Args:
        user: The acting user.
        permission: Permission the action requires, if any.
        target: User record the action mutates, if any.

    Returns:
        An :class:`AuthorizationResult` describing the decision.
    """
    if user is None or not is_admin(user):
        return AuthorizationResult(False, "Admin access required")
    if permission is not None and not has_permission(user, permission):
        return AuthorizationResult(False, "Insufficient permissions")
    if target is not None and not can_manage_user(user, target):
        return AuthorizationResult(False, "Cannot manage user with equal or higher role")
    return ALLOWED


def ensure_authorized(
    user: RoleHolder | None,
    permission: Permission | None = None,
    target: RoleHolder | None = None,
) -> None:
    """Raise :class:`AuthorizationError` unless :func:`authorize` allows the action."""
    result = authorize(user, permission, target)
    if not result:
        raise AuthorizationError(result.reason)
