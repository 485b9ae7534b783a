"""Background jobs handed off by the report service."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories import report_repository
from app.services import auto_review_service, notification_service

logger = logging.getLogger(__name__)


async def notify_moderators_job(db: AsyncSession, report_id: int) -> None:
    report = await report_repository.get_report_by_id(db, report_id)
    if report is None:
        logger.warning("Report %s vanished before moderators were notified", report_id)
        return
    await notification_service.notify_moderators(db, report)


async def auto_review_job(db: AsyncSession, report_id: int) -> None:
    result = await auto_review_service.review_report(db, report_id)
    logger.info("Auto-review finished for report %s: %s", report_id, result.to_dict())


JOB_HANDLERS = {
    "notify_moderators": notify_moderators_job,
    "auto_review": auto_review_job,
}
