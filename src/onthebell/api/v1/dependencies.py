"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from onthebell.core.errors import AuthenticationError
from onthebell.core.security import decode_access_token
from onthebell.db.session import get_db
from onthebell.models import User
from onthebell.services.notifications import NotificationHub, get_notification_hub
from onthebell.services.storage import DocumentStorage, get_document_storage

# HTTP Bearer scheme; missing credentials are reported as 401 by get_current_user.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        AuthenticationError: If the token is missing or invalid, or the user is unknown
    """
    if credentials is None:
        raise AuthenticationError("Authentication required")
    user_id = decode_access_token(credentials.credentials)
    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]

StorageDep = Annotated[DocumentStorage, Depends(get_document_storage)]

HubDep = Annotated[NotificationHub, Depends(get_notification_hub)]
