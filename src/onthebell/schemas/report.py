"""Report-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import CamelModel

ContentType = Literal["post", "comment", "user"]
ReportStatus = Literal["pending", "resolved", "dismissed"]
ReportReason = Literal[
    "spam",
    "harassment",
    "hate_speech",
    "violence",
    "sexual_content",
    "misinformation",
    "inappropriate_content",
    "scam",
    "copyright_violation",
    "other",
]
ModerationAction = Literal[
    "no_action",
    "content_removed",
    "content_hidden",
    "content_edited",
    "user_warned",
    "user_suspended",
    "user_banned",
    "approve",
    "reject",
    "dismiss",
]


class ReportCreate(CamelModel):
    """Schema for submitting a content report."""

    content_type: ContentType
    content_id: str = Field(..., min_length=1)
    reason: ReportReason
    custom_reason: str | None = Field(None, max_length=500)
    description: str | None = Field(None, max_length=2000)


class ReportCreated(CamelModel):
    """Schema returned after a report has been stored."""

    success: bool = True
    report_id: str
    message: str


class ReportResolve(CamelModel):
    """Schema for adjudicating a pending report."""

    report_id: str = Field(..., min_length=1)
    action: ModerationAction
    moderation_reason: str | None = Field(None, max_length=2000)


class ReportResponse(CamelModel):
    """Schema for report information returned by the API."""

    id: str
    reporter_id: str
    reporter_name: str | None
    content_type: ContentType
    content_id: str
    content_author_id: str
    reason: ReportReason
    custom_reason: str | None
    description: str | None
    status: ReportStatus
    moderation_action: ModerationAction | None
    moderation_reason: str | None
    moderated_by: str | None
    moderated_at: datetime | None
    created_at: datetime
    updated_at: datetime


class ReportPageResponse(CamelModel):
    """One page of reports plus the cursor for the next page."""

    reports: list[ReportResponse]
    has_more: bool
    last_id: str | None
