"""Address verification endpoints for members and administrators."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from onthebell.api.v1.dependencies import CurrentUserDep, SessionDep, StorageDep
from onthebell.schemas.common import ActionResponse
from onthebell.schemas.verification import (
    PostalCodeCheck,
    VerificationDecision,
    VerificationListResponse,
    VerificationResponse,
    VerificationStatusResponse,
    VerificationSubmit,
)
from onthebell.services import verification as verification_service

router = APIRouter(tags=["verification"])


@router.post(
    "/verifications",
    response_model=VerificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_verification(
    payload: VerificationSubmit,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VerificationResponse:
    """Submit an address verification request."""
    request = verification_service.submit_verification(
        db,
        current_user,
        payload.method,
        address=payload.address.model_dump() if payload.address else None,
        proof_document=payload.proof_document,
    )
    return VerificationResponse.model_validate(request)


@router.get("/verifications/me", response_model=VerificationStatusResponse)
async def get_my_verification(
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VerificationStatusResponse:
    """Return the state of the current user's latest request."""
    result = verification_service.get_user_verification_status(db, current_user.id)
    return VerificationStatusResponse(
        has_request=result.has_request,
        status=result.status,
        verification_id=result.verification_id,
        method=result.method,
    )


@router.post("/verifications/verify-code", response_model=ActionResponse)
async def verify_code(
    payload: PostalCodeCheck,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ActionResponse:
    """Redeem the code mailed for postal verification."""
    verification_service.verify_postal_code(db, current_user, payload.code)
    return ActionResponse(message="Address verification successful!")


@router.get("/admin/verifications", response_model=VerificationListResponse)
async def get_verification_requests(
    current_user: CurrentUserDep,
    db: SessionDep,
    request_status: str | None = Query(None, alias="status"),
) -> VerificationListResponse:
    """List verification requests, newest first."""
    requests = verification_service.list_verification_requests(
        db,
        current_user,
        status=request_status,
    )
    return VerificationListResponse(
        requests=[VerificationResponse.model_validate(request) for request in requests],
    )


@router.patch("/admin/verifications", response_model=ActionResponse)
async def decide_verification(
    payload: VerificationDecision,
    current_user: CurrentUserDep,
    db: SessionDep,
    storage: StorageDep,
) -> ActionResponse:
    """Approve or reject a pending verification request."""
    verification_service.decide_verification(
        db,
        current_user,
        payload.request_id,
        payload.status,
        admin_notes=payload.admin_notes,
        storage=storage,
    )
    return ActionResponse(message=f"Verification {payload.status} successfully")
