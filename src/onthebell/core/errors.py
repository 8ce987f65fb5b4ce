"""Domain error taxonomy shared by services and HTTP handlers.

Services raise these exceptions; the application registers a single handler
that renders them as ``{"detail": ...}`` with the status code carried by the
exception class.
"""

from __future__ import annotations

from fastapi import status


class OnTheBellError(Exception):
    """Base class for every error raised by the moderation core."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthenticationError(OnTheBellError):
    """No identity, or an identity token that could not be validated."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class AuthorizationError(OnTheBellError):
    """Authenticated, but the role or permission does not allow the action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Insufficient permissions"


class ValidationError(OnTheBellError):
    """Malformed input, invalid enum value or a forbidden self-report."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request data"


class NotFoundError(OnTheBellError):
    """The target record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class StateError(OnTheBellError):
    """Illegal lifecycle transition, such as resolving a closed report."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Invalid state transition"


class ExternalDependencyError(OnTheBellError):
    """A store or third-party collaborator failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "External dependency failure"


__all__ = [
    "OnTheBellError",
    "AuthenticationError",
    "AuthorizationError",
    "ValidationError",
    "NotFoundError",
    "StateError",
    "ExternalDependencyError",
]
