"""Content report lifecycle: submission, admin listing and adjudication."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from onthebell.core.errors import NotFoundError, StateError, ValidationError
from onthebell.core.roles import Permission, ensure_authorized
from onthebell.core.settings import settings
from onthebell.db.time import utcnow
from onthebell.models import Comment, ContentReport, Post, User
from onthebell.models.report import (
    CONTENT_TYPE_COMMENT,
    CONTENT_TYPE_POST,
    CONTENT_TYPE_USER,
    MODERATION_ACTIONS,
    REPORT_REASONS,
    REPORT_STATUS_DISMISSED,
    REPORT_STATUS_PENDING,
    REPORT_STATUS_RESOLVED,
)

logger = logging.getLogger(__name__)

CONTENT_TYPES = (CONTENT_TYPE_POST, CONTENT_TYPE_COMMENT, CONTENT_TYPE_USER)
REPORT_STATUSES = (REPORT_STATUS_PENDING, REPORT_STATUS_RESOLVED, REPORT_STATUS_DISMISSED)

# Actions that close a report without upholding it.
DISMISS_ACTIONS = frozenset({"reject", "dismiss"})
# Actions that also flag the reported content.
CONTENT_ACTIONS = frozenset({"content_hidden", "content_removed"})


@dataclass
class ReportPage:
    """One page of reports, newest first."""

    reports: list[ContentReport]
    has_more: bool
    last_id: str | None


def _resolve_content_author(db: Session, content_type: str, content_id: str) -> str:
    """Return the author of the reported content, or the reported user's id."""
    if content_type == CONTENT_TYPE_POST:
        post = db.get(Post, content_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post.author_id
    if content_type == CONTENT_TYPE_COMMENT:
        comment = db.get(Comment, content_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment.author_id
    if content_type == CONTENT_TYPE_USER:
        if db.get(User, content_id) is None:
            raise NotFoundError("User not found")
        return content_id
    raise ValidationError("Invalid content type")


def create_report(
    db: Session,
    reporter: User,
    content_type: str,
    content_id: str,
    reason: str,
    custom_reason: str | None = None,
    description: str | None = None,
) -> ContentReport:
    """Store a pending report against a post, comment or user.

    Raises:
        ValidationError: Unknown content type or reason, or a report against
            the reporter's own post or comment.
        NotFoundError: The reported content does not exist.
    """
    if content_type not in CONTENT_TYPES:
        raise ValidationError("Invalid content type")
    if reason not in REPORT_REASONS:
        raise ValidationError("Invalid report reason")
    if not content_id:
        raise ValidationError("Content type, content ID, and reason are required")

    content_author_id = _resolve_content_author(db, content_type, content_id)

    if content_author_id == reporter.id and content_type != CONTENT_TYPE_USER:
        raise ValidationError("Cannot report your own content")

    report = ContentReport(
        reporter_id=reporter.id,
        reporter_name=reporter.name,
        content_type=content_type,
        content_id=content_id,
        content_author_id=content_author_id,
        reason=reason,
        custom_reason=custom_reason if reason == "other" else None,
        description=description,
        status=REPORT_STATUS_PENDING,
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info(
        "Report %s filed by %s against %s %s",
        report.id,
        reporter.id,
        content_type,
        content_id,
    )
    return report


def list_reports(
    db: Session,
    admin: User,
    status: str = REPORT_STATUS_PENDING,
    content_type: str | None = None,
    limit: int | None = None,
    cursor: str | None = None,
) -> ReportPage:
    """Return a page of reports for the moderation queue.

    Args:
        status: Report status to list.
        content_type: Optional content type filter.
        limit: Page size; defaults to ``settings.reports_page_size``.
        cursor: Id of the last report on the previous page. Unknown ids are
            ignored and the first page is returned.
    """
    ensure_authorized(admin, Permission.manage_reports)
    if status not in REPORT_STATUSES:
        raise ValidationError("Invalid report status")
    if content_type is not None and content_type not in CONTENT_TYPES:
        raise ValidationError("Invalid content type")

    page_size = min(limit or settings.reports_page_size, settings.max_page_size)
    query = db.query(ContentReport).filter(ContentReport.status == status)
    if content_type:
        query = query.filter(ContentReport.content_type == content_type)

    if cursor:
        anchor = db.get(ContentReport, cursor)
        if anchor is not None:
            query = query.filter(
                or_(
                    ContentReport.created_at < anchor.created_at,
                    and_(
                        ContentReport.created_at == anchor.created_at,
                        ContentReport.id < anchor.id,
                    ),
                )
            )

    rows = (
        query.order_by(ContentReport.created_at.desc(), ContentReport.id.desc())
        .limit(page_size + 1)
        .all()
    )
    has_more = len(rows) > page_size
    reports = rows[:page_size]
    return ReportPage(
        reports=reports,
        has_more=has_more,
        last_id=reports[-1].id if reports else None,
    )


def _flag_content(
    db: Session,
    report: ContentReport,
    action: str,
    admin: User,
    moderation_reason: str | None,
) -> bool:
    """Hide or remove the reported content.

    Runs after the report transition has been committed. Any failure here is
    logged and swallowed.

    Returns:
        True if the content was updated.
    """
    model: type[Post] | type[Comment]
    if report.content_type == CONTENT_TYPE_POST:
        model = Post
    elif report.content_type == CONTENT_TYPE_COMMENT:
        model = Comment
    else:
        logger.info(
            "Report %s targets a user account; %s has no content to flag",
            report.id,
            action,
        )
        return False

    try:
        content = db.get(model, report.content_id)
        if content is None:
            logger.warning(
                "Reported %s %s no longer exists; report %s resolved without content change",
                report.content_type,
                report.content_id,
                report.id,
            )
            return False

        if action == "content_hidden":
            content.is_hidden = True
        else:
            content.is_deleted = True
        content.moderated_by = admin.id
        content.moderated_at = utcnow()
        if moderation_reason:
            content.moderation_reason = moderation_reason
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(
            "Failed to apply %s to %s %s for report %s",
            action,
            report.content_type,
            report.content_id,
            report.id,
            exc_info=True,
        )
        return False
    return True


def resolve_report(
    db: Session,
    admin: User,
    report_id: str,
    action: str,
    moderation_reason: str | None = None,
) -> ContentReport:
    """Move a pending report to resolved or dismissed.

    ``reject`` and ``dismiss`` dismiss the report; every other action resolves
    it. ``content_hidden`` and ``content_removed`` additionally flag the
    reported post or comment on a best-effort basis.

    Raises:
        AuthorizationError: ``admin`` lacks ``manage_reports``.
        ValidationError: Unknown moderation action.
        NotFoundError: No report with ``report_id``.
        StateError: The report has already been resolved or dismissed.
    """
    ensure_authorized(admin, Permission.manage_reports)
    if action not in MODERATION_ACTIONS:
        raise ValidationError("Invalid moderation action")

    report = db.get(ContentReport, report_id)
    if report is None:
        raise NotFoundError("Report not found")
    if report.status != REPORT_STATUS_PENDING:
        raise StateError(f"Report has already been {report.status}")

    now = utcnow()
    report.status = REPORT_STATUS_DISMISSED if action in DISMISS_ACTIONS else REPORT_STATUS_RESOLVED
    report.moderation_action = action
    report.moderation_reason = moderation_reason
    report.moderated_by = admin.id
    report.moderated_at = now
    report.updated_at = now
    db.commit()
    logger.info("Report %s %s by %s (%s)", report.id, report.status, admin.id, action)

    if action in CONTENT_ACTIONS:
        _flag_content(db, report, action, admin, moderation_reason)

    return report
