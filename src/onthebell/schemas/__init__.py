"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ActionResponse
from .dashboard import AdminStatsResponse
from .notification import NotificationListResponse, NotificationResponse
from .post import PostModerate, PostPageResponse, PostResponse
from .report import ReportCreate, ReportCreated, ReportPageResponse, ReportResolve, ReportResponse
from .user import (
    AdminPermissionsResponse,
    AdminProfileResponse,
    UserPageResponse,
    UserResponse,
    UserUpdate,
)
from .verification import (
    PostalCodeCheck,
    VerificationDecision,
    VerificationListResponse,
    VerificationResponse,
    VerificationStatusResponse,
    VerificationSubmit,
)

__all__ = [
    "ActionResponse",
    "AdminStatsResponse",
    "NotificationListResponse", "NotificationResponse",
    "PostModerate", "PostPageResponse", "PostResponse",
    "ReportCreate", "ReportCreated", "ReportPageResponse", "ReportResolve", "ReportResponse",
    "AdminPermissionsResponse", "AdminProfileResponse",
    "UserPageResponse", "UserResponse", "UserUpdate",
    "PostalCodeCheck", "VerificationDecision", "VerificationListResponse",
    "VerificationResponse", "VerificationStatusResponse", "VerificationSubmit",
]
