"""Content report endpoints: submission and the admin moderation queue."""

from __future__ import annotations

from fastapi import APIRouter, Query

from onthebell.api.v1.dependencies import CurrentUserDep, SessionDep
from onthebell.schemas.common import ActionResponse
from onthebell.schemas.report import (
    ReportCreate,
    ReportCreated,
    ReportPageResponse,
    ReportResolve,
    ReportResponse,
)
from onthebell.services import reports as report_service

router = APIRouter(tags=["reports"])


@router.post("/reports", response_model=ReportCreated)
async def submit_report(
    payload: ReportCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ReportCreated:
    """Report a post, comment or user for moderator review."""
    report = report_service.create_report(
        db,
        current_user,
        payload.content_type,
        payload.content_id,
        payload.reason,
        custom_reason=payload.custom_reason,
        description=payload.description,
    )
    return ReportCreated(
        report_id=report.id,
        message="Report submitted successfully. Our moderation team will review it shortly.",
    )


@router.get("/admin/reports", response_model=ReportPageResponse)
async def get_reports(
    current_user: CurrentUserDep,
    db: SessionDep,
    status: str = Query("pending"),
    content_type: str | None = Query(None, alias="contentType"),
    limit: int | None = Query(None, ge=1),
    cursor: str | None = Query(None),
    start_after: str | None = Query(None, alias="startAfter"),
) -> ReportPageResponse:
    """List reports for the moderation queue, newest first."""
    page = report_service.list_reports(
        db,
        current_user,
        status=status,
        content_type=content_type,
        limit=limit,
        cursor=cursor or start_after,
    )
    return ReportPageResponse(
        reports=[ReportResponse.model_validate(report) for report in page.reports],
        has_more=page.has_more,
        last_id=page.last_id,
    )


@router.post("/admin/reports/resolve", response_model=ActionResponse)
async def resolve_report(
    payload: ReportResolve,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> ActionResponse:
    """Resolve or dismiss a pending report."""
    report = report_service.resolve_report(
        db,
        current_user,
        payload.report_id,
        payload.action,
        payload.moderation_reason,
    )
    return ActionResponse(message=f"Report {report.status} successfully")
