"""Verification-related Pydantic schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import CamelModel

VerificationMethod = Literal["document", "postal", "other"]
VerificationStatus = Literal["pending", "approved", "rejected"]


class Address(CamelModel):
    """Street address claimed by the requester."""

    street: str = ""
    suburb: str
    postcode: str
    state: str
    country: str


class VerificationSubmit(CamelModel):
    """Schema for submitting an address verification request."""

    method: VerificationMethod
    address: Address | None = None
    proof_document: str | None = Field(None, description="Storage reference of the proof")


class VerificationDecision(CamelModel):
    """Schema for an admin approving or rejecting a request."""

    request_id: str = Field(..., min_length=1)
    status: Literal["approved", "rejected"]
    admin_notes: str | None = Field(None, max_length=2000)


class PostalCodeCheck(CamelModel):
    """Schema for redeeming a mailed verification code."""

    code: str = Field(..., min_length=1, max_length=16)


class VerificationResponse(CamelModel):
    """Schema for verification requests returned by the API."""

    id: str
    user_id: str
    user_email: str | None
    method: VerificationMethod
    status: VerificationStatus
    address: Address | None
    proof_document: str | None
    document_deleted_at: datetime | None
    postal_code_expires_at: datetime | None
    submitted_at: datetime
    reviewed_at: datetime | None
    reviewed_by: str | None
    review_notes: str | None


class VerificationListResponse(CamelModel):
    requests: list[VerificationResponse]


class VerificationStatusResponse(CamelModel):
    """Latest verification state for the current user."""

    has_request: bool
    status: VerificationStatus | None = None
    verification_id: str | None = None
    method: VerificationMethod | None = None
