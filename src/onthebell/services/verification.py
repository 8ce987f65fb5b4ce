"""Address verification lifecycle: submission, postal codes and admin decisions."""

from __future__ import annotations

import logging
import secrets
import string
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from sqlalchemy.orm import Session

from onthebell.core.errors import (
    NotFoundError,
    StateError,
    ValidationError,
)
from onthebell.core.roles import Permission, ensure_authorized
from onthebell.core.settings import settings
from onthebell.db.time import as_utc, utcnow
from onthebell.models import User, VerificationRequest
from onthebell.models.user import (
    VERIFICATION_STATUS_APPROVED,
    VERIFICATION_STATUS_PENDING,
    VERIFICATION_STATUS_REJECTED,
)
from onthebell.models.verification import (
    REQUEST_STATUS_APPROVED,
    REQUEST_STATUS_PENDING,
    REQUEST_STATUS_REJECTED,
    VERIFICATION_METHOD_DOCUMENT,
    VERIFICATION_METHOD_POSTAL,
    VERIFICATION_METHODS,
)
from onthebell.services.notifications import NOTIFICATION_TYPE_INFO, create_notification
from onthebell.services.storage import (
    DocumentStorage,
    get_document_storage,
    validate_document_reference,
)

logger = logging.getLogger(__name__)

BELLARINE_SUBURBS = (
    "Queenscliff",
    "Point Lonsdale",
    "Ocean Grove",
    "Barwon Heads",
    "Batesford",
    "Bellarine",
    "Clifton Springs",
    "Curlewis",
    "Drysdale",
    "Indented Head",
    "Leopold",
    "Mannerim",
    "Marcus Hill",
    "Portarlington",
    "St Leonards",
    "Swan Bay",
    "Wallington",
    "Connewarre",
    "Moolap",
    "Newcomb",
    "Whittington",
)
BELLARINE_POSTCODES = ("3220", "3221", "3222", "3223", "3224", "3225")

_POSTAL_CODE_ALPHABET = string.digits + string.ascii_uppercase

APPROVED_MESSAGE = (
    "Your address has been verified! You now have full access to "
    "OnTheBell community features."
)
DOCUMENT_DELETED_MESSAGE = (
    "Your verification document has been automatically deleted from our "
    "servers for your privacy and security."
)


@dataclass
class VerificationStatus:
    """Most recent verification request of a user."""

    has_request: bool
    status: str | None = None
    verification_id: str | None = None
    method: str | None = None


def validate_bellarine_address(address: Mapping[str, Any]) -> tuple[bool, str | None]:
    """Check that ``address`` lies on the Bellarine Peninsula.

    Returns:
        ``(True, None)`` when valid, otherwise ``(False, reason)``.
    """
    country = str(address.get("country", "")).strip().lower()
    if country not in ("australia", "au"):
        return False, "Address must be in Australia"

    state = str(address.get("state", "")).strip().lower()
    if state not in ("victoria", "vic"):
        return False, "Address must be in Victoria"

    if str(address.get("postcode", "")).strip() not in BELLARINE_POSTCODES:
        return False, "Postcode is not within the Bellarine Peninsula area"

    suburb = str(address.get("suburb", "")).strip()
    if suburb.lower() not in {name.lower() for name in BELLARINE_SUBURBS}:
        return False, (
            f"{suburb} is not recognized as a Bellarine Peninsula suburb. "
            f"Valid suburbs include: {', '.join(BELLARINE_SUBURBS)}"
        )
    return True, None


def generate_postal_code(length: int | None = None) -> str:
    """Return a random uppercase alphanumeric code for mailed verification."""
    size = length or settings.postal_code_length
    return "".join(secrets.choice(_POSTAL_CODE_ALPHABET) for _ in range(size))


def submit_verification(
    db: Session,
    user: User,
    method: str,
    address: Mapping[str, Any] | None = None,
    proof_document: str | None = None,
) -> VerificationRequest:
    """Create a pending verification request for ``user``.

    Raises:
        ValidationError: Unknown method, missing or unsafe proof document
            reference, or an address outside the service area.
        StateError: The user already has a pending request.
    """
    if method not in VERIFICATION_METHODS:
        raise ValidationError("Invalid verification method")
    if method == VERIFICATION_METHOD_DOCUMENT and not proof_document:
        raise ValidationError("Document verification requires a proof document")
    if method == VERIFICATION_METHOD_DOCUMENT:
        validate_document_reference(proof_document)
    if address is not None:
        ok, error = validate_bellarine_address(address)
        if not ok:
            raise ValidationError(error)

    pending = (
        db.query(VerificationRequest)
        .filter(
            VerificationRequest.user_id == user.id,
            VerificationRequest.status == REQUEST_STATUS_PENDING,
        )
        .first()
    )
    if pending is not None:
        raise StateError("A verification request is already pending")

    now = utcnow()
    request = VerificationRequest(
        user_id=user.id,
        user_email=user.email,
        method=method,
        status=REQUEST_STATUS_PENDING,
        address=dict(address) if address is not None else None,
        proof_document=proof_document if method == VERIFICATION_METHOD_DOCUMENT else None,
        submitted_at=now,
    )
    if method == VERIFICATION_METHOD_POSTAL:
        request.postal_code = generate_postal_code()
        request.postal_code_expires_at = now + timedelta(days=settings.postal_code_ttl_days)

    user.verification_status = VERIFICATION_STATUS_PENDING
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("Verification %s submitted by %s via %s", request.id, user.id, method)
    return request


def verify_postal_code(db: Session, user: User, code: str) -> VerificationRequest:
    """Approve the user's pending postal request if ``code`` matches.

    Raises:
        NotFoundError: No pending postal verification for the user.
        ValidationError: The code expired or does not match.
    """
    request = (
        db.query(VerificationRequest)
        .filter(
            VerificationRequest.user_id == user.id,
            VerificationRequest.method == VERIFICATION_METHOD_POSTAL,
            VerificationRequest.status == REQUEST_STATUS_PENDING,
        )
        .order_by(VerificationRequest.submitted_at.desc())
        .first()
    )
    if request is None:
        raise NotFoundError("No pending postal verification found")

    now = utcnow()
    if request.postal_code_expires_at is not None and as_utc(request.postal_code_expires_at) < now:
        raise ValidationError("Verification code has expired")
    if request.postal_code != code.strip().upper():
        raise ValidationError("Invalid verification code")

    request.status = REQUEST_STATUS_APPROVED
    request.reviewed_at = now
    request.reviewed_by = "postal_verification"
    user.is_verified = True
    user.verification_status = VERIFICATION_STATUS_APPROVED
    user.verified_at = now
    db.commit()
    logger.info("Postal verification %s approved for %s", request.id, user.id)
    return request


def get_user_verification_status(db: Session, user_id: str) -> VerificationStatus:
    latest = (
        db.query(VerificationRequest)
        .filter(VerificationRequest.user_id == user_id)
        .order_by(VerificationRequest.submitted_at.desc())
        .first()
    )
    if latest is None:
        return VerificationStatus(has_request=False)
    return VerificationStatus(
        has_request=True,
        status=latest.status,
        verification_id=latest.id,
        method=latest.method,
    )


def list_verification_requests(
    db: Session,
    admin: User,
    status: str | None = None,
) -> list[VerificationRequest]:
    """Return verification requests, newest first."""
    ensure_authorized(admin)
    query = db.query(VerificationRequest)
    if status:
        query = query.filter(VerificationRequest.status == status)
    return query.order_by(VerificationRequest.submitted_at.desc()).all()


def _decision_message(status: str, admin_notes: str | None) -> tuple[str, str]:
    if status == REQUEST_STATUS_APPROVED:
        return "Address Verification Approved", APPROVED_MESSAGE
    reason = f"Reason: {admin_notes}" if admin_notes else "Please try again or contact support."
    return (
        "Address Verification Rejected",
        f"Your address verification was not approved. {reason}",
    )


def _delete_proof_document(
    db: Session,
    request: VerificationRequest,
    storage: DocumentStorage,
) -> bool:
    """Delete the proof document of an approved request.

    Any storage failure is logged and never undoes the approval.
    """
    reference = request.proof_document
    if not reference:
        return False
    try:
        storage.delete(reference)
    except Exception:
        logger.error(
            "Failed to delete verification document for request %s",
            request.id,
            exc_info=True,
        )
        return False

    request.proof_document = None
    request.document_deleted_at = utcnow()
    db.commit()
    create_notification(
        db,
        request.user_id,
        NOTIFICATION_TYPE_INFO,
        "Document Deleted",
        DOCUMENT_DELETED_MESSAGE,
    )
    return True


def decide_verification(
    db: Session,
    admin: User,
    request_id: str,
    status: str,
    admin_notes: str | None = None,
    storage: DocumentStorage | None = None,
) -> VerificationRequest:
    """Approve or reject a pending verification request.

    The request and the requester's profile are updated and the decision
    notification is sent before any attempt to delete the proof document.

    Raises:
        AuthorizationError: ``admin`` lacks ``manage_users``.
        ValidationError: ``status`` is neither approved nor rejected.
        NotFoundError: No request with ``request_id``.
        StateError: The request has already been decided.
    """
    ensure_authorized(admin, Permission.manage_users)
    if status not in (REQUEST_STATUS_APPROVED, REQUEST_STATUS_REJECTED):
        raise ValidationError("Invalid request data")

    request = db.get(VerificationRequest, request_id)
    if request is None:
        raise NotFoundError("Verification request not found")
    if request.status != REQUEST_STATUS_PENDING:
        raise StateError(f"Verification request has already been {request.status}")

    now = utcnow()
    request.status = status
    request.reviewed_at = now
    request.reviewed_by = admin.id
    request.review_notes = admin_notes or ""

    requester = db.get(User, request.user_id)
    if requester is not None:
        if status == REQUEST_STATUS_APPROVED:
            requester.is_verified = True
            requester.verification_status = VERIFICATION_STATUS_APPROVED
            requester.verified_at = now
        elif not requester.is_verified:
            requester.verification_status = VERIFICATION_STATUS_REJECTED
    db.commit()
    logger.info("Verification %s %s by %s", request.id, status, admin.id)

    title, message = _decision_message(status, admin_notes)
    create_notification(db, request.user_id, NOTIFICATION_TYPE_INFO, title, message)

    if (
        status == REQUEST_STATUS_APPROVED
        and request.method == VERIFICATION_METHOD_DOCUMENT
        and request.proof_document
    ):
        _delete_proof_document(db, request, storage or get_document_storage())

    return request
