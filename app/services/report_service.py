"""
Report workflow service.

Validates and classifies new reports, enforces the status state machine and
runs the moderation action chosen when a report is resolved. Moderator
alerts and automated review are handed to the background worker and never
awaited here.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ActionExecutionError,
    DuplicateReportError,
    InvalidTransitionError,
    ReportNotFoundError,
    RequiredFieldError,
    ResourceNotFoundError,
    ValidationError,
)
from app.models.report import Report
from app.repositories import report_repository
from app.schemas.report import (
    ActionTaken,
    ReportPriority,
    ReportStatus,
    ReportType,
    ReportTypeInfo,
)
from app.services import notification_service, resource_service, user_service
from app.services.report_policy import (
    ADDITIONAL_INFO_MAX_LENGTH,
    LIVE_STATUSES,
    REASON_MAX_LENGTH,
    REASON_MIN_LENGTH,
    REPORT_TYPE_CONFIG,
    is_valid_transition,
    priority_for_type,
    requires_auto_review,
    should_notify_moderators,
)
from app.workers.runner import worker

logger = logging.getLogger(__name__)

RESOLUTION_NOTES_MAX_LENGTH = 1000


def _coerce(enum_cls: type[Enum], value: Any, field: str):
    """Convert a raw value to an enum member or raise ValidationError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field}: {value}", field=field)


def _validate_report_data(
    report_type: ReportType | str,
    reason: str | None,
    additional_info: str | None,
) -> tuple[ReportType, str, str | None]:
    """Check type and text lengths. Returns normalized (type, reason, additional_info)."""
    if report_type is None or report_type == "":
        raise RequiredFieldError("Report type is required", field="type")
    if reason is None:
        raise RequiredFieldError("Report reason is required", field="reason")

    report_type = _coerce(ReportType, report_type, "type")

    reason = reason.strip()
    if len(reason) < REASON_MIN_LENGTH:
        raise ValidationError(
            f"Reason must be at least {REASON_MIN_LENGTH} characters",
            field="reason",
        )
    if len(reason) > REASON_MAX_LENGTH:
        raise ValidationError(
            f"Reason cannot exceed {REASON_MAX_LENGTH} characters",
            field="reason",
        )

    if additional_info is not None:
        additional_info = additional_info.strip() or None
    if additional_info and len(additional_info) > ADDITIONAL_INFO_MAX_LENGTH:
        raise ValidationError(
            f"Additional information cannot exceed {ADDITIONAL_INFO_MAX_LENGTH} characters",
            field="additional_info",
        )

    return report_type, reason, additional_info


def _schedule_side_effects(report: Report) -> None:
    """Hand moderator alerts and automated review to the worker."""
    if should_notify_moderators(ReportPriority(report.priority)):
        worker.enqueue_job("notify_moderators", report_id=report.id)

    if requires_auto_review(ReportType(report.type)):
        worker.enqueue_job("auto_review", report_id=report.id)


# ==================== Submission ====================


async def submit_report(
    db: AsyncSession,
    reporter_id: UUID,
    resource_id: UUID,
    report_type: ReportType | str,
    reason: str,
    additional_info: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> Report:
    """
    Create a new report in status pending.

    Raises:
        ValidationError: Unknown type or reason/additional info out of bounds
        ResourceNotFoundError: The resource does not exist
        DuplicateReportError: The reporter has a pending or reviewing report
            on the same resource
    """
    report_type, reason, additional_info = _validate_report_data(
        report_type, reason, additional_info
    )

    if not await resource_service.resource_exists(db, resource_id):
        raise ResourceNotFoundError()

    if await report_repository.has_user_reported(db, reporter_id, resource_id):
        raise DuplicateReportError()

    priority = priority_for_type(report_type)

    report = await report_repository.create_report(
        db,
        user_id=reporter_id,
        resource_id=resource_id,
        type=report_type.value,
        reason=reason,
        additional_info=additional_info,
        priority=priority.value,
        status=ReportStatus.pending.value,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    logger.info(
        "Report %s created (type=%s, priority=%s, resource_id=%s)",
        report.id,
        report.type,
        report.priority,
        report.resource_id,
    )

    _schedule_side_effects(report)
    return report


# ==================== State machine ====================


async def transition_report(
    db: AsyncSession,
    report_id: int,
    new_status: ReportStatus | str,
    moderator_id: UUID,
    resolution_notes: str | None = None,
    action_taken: ActionTaken | str | None = None,
) -> Report:
    """
    Move a report to a new status.

    Entering resolved records the resolver and time, then runs the chosen
    action. A failed action is logged and leaves the report resolved.

    Raises:
        ReportNotFoundError: Unknown report
        ValidationError: Unknown status, or resolving without action_taken
        InvalidTransitionError: The edge is not allowed, or another moderator
            changed the status first
        DuplicateReportError: Reopening would give the reporter two open
            reports on the same resource
    """
    report = await report_repository.get_report_by_id(db, report_id)
    if report is None:
        raise ReportNotFoundError()

    target = _coerce(ReportStatus, new_status, "status")
    current = ReportStatus(report.status)

    if not is_valid_transition(current, target):
        raise InvalidTransitionError(current.value, target.value)

    action = None
    if target == ReportStatus.resolved:
        if not action_taken:
            raise RequiredFieldError(
                "action_taken is required to resolve a report",
                field="action_taken",
            )
        action = _coerce(ActionTaken, action_taken, "action_taken")

    if resolution_notes is not None and len(resolution_notes) > RESOLUTION_NOTES_MAX_LENGTH:
        raise ValidationError(
            f"Resolution notes cannot exceed {RESOLUTION_NOTES_MAX_LENGTH} characters",
            field="resolution_notes",
        )

    # Reopening must not give the reporter a second open report on the resource
    if current not in LIVE_STATUSES and target in LIVE_STATUSES:
        if await report_repository.has_user_reported(
            db, report.user_id, report.resource_id, exclude_report_id=report.id
        ):
            raise DuplicateReportError(
                "The reporter already has another open report on this resource"
            )

    values: dict[str, Any] = {"status": target.value}
    if resolution_notes is not None:
        values["resolution_notes"] = resolution_notes
    if action is not None:
        values["resolved_at"] = datetime.now(timezone.utc)
        values["resolved_by"] = moderator_id
        values["action_taken"] = action.value

    applied = await report_repository.update_report_status(
        db, report_id, current.value, values
    )
    if not applied:
        raise InvalidTransitionError(
            current.value,
            target.value,
            message="The report was updated by someone else. Reload it and try again.",
        )

    logger.info(
        "Report %s moved %s -> %s by %s", report_id, current.value, target.value, moderator_id
    )

    updated = await report_repository.get_report_by_id(db, report_id)

    if action is not None:
        await execute_report_action(db, updated, action)
        updated = await report_repository.get_report_by_id(db, report_id)

    return updated


# ==================== Action executor ====================


async def _get_author_id(db: AsyncSession, report: Report, action: ActionTaken) -> UUID:
    author_id = await resource_service.get_resource_author_id(db, report.resource_id)
    if author_id is None:
        raise ActionExecutionError(
            report.id,
            action.value,
            f"Resource {report.resource_id} has no author to act on",
        )
    return author_id


async def _remove_content(db: AsyncSession, report: Report) -> None:
    await resource_service.hide_resource(db, report.resource_id)


async def _warn_author(db: AsyncSession, report: Report) -> None:
    author_id = await _get_author_id(db, report, ActionTaken.warning_issued)
    await notification_service.warn_user(db, author_id, report)


async def _suspend_author(db: AsyncSession, report: Report) -> None:
    author_id = await _get_author_id(db, report, ActionTaken.user_suspended)
    await user_service.suspend_user(db, author_id)


# category_changed, content_modified and no_action are carried out by their
# owning features or by hand
ACTION_HANDLERS: MappingProxyType[
    ActionTaken, Callable[[AsyncSession, Report], Awaitable[None]]
] = MappingProxyType({
    ActionTaken.content_removed: _remove_content,
    ActionTaken.warning_issued: _warn_author,
    ActionTaken.user_suspended: _suspend_author,
})


async def _run_action(db: AsyncSession, report: Report, action: ActionTaken) -> None:
    handler = ACTION_HANDLERS.get(action)
    if handler is None:
        logger.info("No automatic side effect for %s on report %s", action.value, report.id)
        return

    try:
        await handler(db, report)
    except ActionExecutionError:
        raise
    except Exception as e:
        raise ActionExecutionError(report.id, action.value, str(e)) from e


async def execute_report_action(
    db: AsyncSession,
    report: Report,
    action: ActionTaken | str,
) -> bool:
    """
    Carry out the side effect of a resolution. Safe to call again with the
    same resolved report: every collaborator call is idempotent.

    Returns:
        True if the action completed, False if it failed (already logged)
    """
    report_id = report.id
    action = ActionTaken(action)

    try:
        await _run_action(db, report, action)
    except ActionExecutionError as e:
        await db.rollback()
        logger.error(
            "Failed to execute report action %s for report %s: %s",
            action.value,
            report_id,
            e.message,
            exc_info=True,
        )
        return False

    logger.info("Report action %s executed for report %s", action.value, report_id)
    return True


# ==================== Queries ====================


async def get_report_details(db: AsyncSession, report_id: int) -> Report:
    report = await report_repository.get_report_by_id(db, report_id)
    if report is None:
        raise ReportNotFoundError()
    return report


async def get_user_reports(
    db: AsyncSession,
    user_id: UUID,
    status: ReportStatus | str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Report], int]:
    """Reports filed by a user, newest first."""
    if status:
        status = _coerce(ReportStatus, status, "status").value
    return await report_repository.get_reports_by_user(db, user_id, status, page, per_page)


async def get_resource_reports(
    db: AsyncSession,
    resource_id: UUID,
    status: ReportStatus | str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Report], int]:
    """Reports filed against a resource, newest first."""
    if status:
        status = _coerce(ReportStatus, status, "status").value
    return await report_repository.get_reports_by_resource(
        db, resource_id, status, page, per_page
    )


async def get_admin_reports(
    db: AsyncSession,
    status: ReportStatus | str | None = None,
    report_type: ReportType | str | None = None,
    priority: ReportPriority | str | None = None,
    search: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Report], int]:
    """Filtered, paginated reports for the moderation dashboard."""
    if status:
        status = _coerce(ReportStatus, status, "status").value
    if report_type:
        report_type = _coerce(ReportType, report_type, "type").value
    if priority:
        priority = _coerce(ReportPriority, priority, "priority").value
    search = search.strip() if search else None

    return await report_repository.get_reports_for_admin(
        db,
        status=status,
        report_type=report_type,
        priority=priority,
        search=search or None,
        page=page,
        per_page=per_page,
    )


async def get_report_statistics(
    db: AsyncSession,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> dict[str, Any]:
    """Counts by status, type and priority plus the resolution rate in percent."""
    if start_date and end_date and end_date < start_date:
        raise ValidationError("end_date must be after start_date", field="end_date")

    stats = await report_repository.get_report_statistics(db, start_date, end_date)
    by_status = stats["by_status"]
    total = stats["total"]
    resolved = by_status.get(ReportStatus.resolved.value, 0)

    return {
        "total": total,
        "pending": by_status.get(ReportStatus.pending.value, 0),
        "reviewing": by_status.get(ReportStatus.reviewing.value, 0),
        "resolved": resolved,
        "dismissed": by_status.get(ReportStatus.dismissed.value, 0),
        "by_type": stats["by_type"],
        "by_priority": stats["by_priority"],
        "resolution_rate": round(resolved / total * 100, 2) if total else 0.0,
    }


async def delete_report(db: AsyncSession, report_id: int) -> None:
    """Hard delete a report (admin only)."""
    deleted = await report_repository.delete_report(db, report_id)
    if not deleted:
        raise ReportNotFoundError()
    logger.info("Report %s deleted", report_id)


def list_report_types() -> list[ReportTypeInfo]:
    """Catalogue of report types for the submission form."""
    return [
        ReportTypeInfo(
            value=report_type,
            label=config.label,
            description=config.description,
            priority=config.priority,
            auto_review=config.auto_review,
        )
        for report_type, config in REPORT_TYPE_CONFIG.items()
    ]
