"""Automated review of low-risk report types (spam, misleading title, wrong category)."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.repositories import report_repository
from app.schemas.report import ReportStatus, ReportType
from app.services import notification_service
from app.services.report_policy import requires_auto_review

logger = logging.getLogger(__name__)


class AutoReviewResult:
    """Result of an automated review attempt. Never written to the report."""

    def __init__(
        self,
        reviewed: bool = False,
        live_reports_of_type: int = 0,
        escalated: bool = False,
        skipped_reason: str | None = None,
    ):
        self.reviewed = reviewed
        self.live_reports_of_type = live_reports_of_type
        self.escalated = escalated
        self.skipped_reason = skipped_reason

    def to_dict(self) -> dict:
        return {
            "reviewed": self.reviewed,
            "live_reports_of_type": self.live_reports_of_type,
            "escalated": self.escalated,
            "skipped_reason": self.skipped_reason,
        }


async def review_report(db: AsyncSession, report_id: int) -> AutoReviewResult:
    """
    Look for corroborating reports on the same resource.

    When enough reporters independently flag a resource for the same
    auto-review type, moderators are alerted even though the type alone has
    a low or medium priority. The report row itself is left untouched.

    Args:
        db: Database session
        report_id: ID of the report to review

    Returns:
        AutoReviewResult with details of the attempt
    """
    if not settings.ENABLE_AUTO_REVIEW:
        return AutoReviewResult(skipped_reason="Auto-review is disabled")

    report = await report_repository.get_report_by_id(db, report_id)
    if report is None:
        return AutoReviewResult(skipped_reason="Report not found")

    if report.status != ReportStatus.pending.value:
        return AutoReviewResult(skipped_reason=f"Report already {report.status}")

    if not requires_auto_review(ReportType(report.type)):
        return AutoReviewResult(skipped_reason=f"Type {report.type} is reviewed manually")

    count = await report_repository.count_live_reports(
        db, report.resource_id, report.type
    )
    result = AutoReviewResult(reviewed=True, live_reports_of_type=count)

    if count >= settings.AUTO_REVIEW_ESCALATION_THRESHOLD:
        logger.info(
            "Resource %s has %d open %s reports, escalating report %s",
            report.resource_id,
            count,
            report.type,
            report.id,
        )
        await notification_service.notify_moderators(db, report)
        result.escalated = True

    return result
