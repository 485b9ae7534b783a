"""Notification collaborator: in-app notifications for moderators and authors."""

import logging
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.models.report import Report
from app.services import user_service

logger = logging.getLogger(__name__)

MODERATOR_ALERT = "moderator_alert"
WARNING = "warning"


def _report_link(report: Report) -> dict:
    return {"resource_type": "report", "resource_id": str(report.id)}


async def _already_notified(
    db: AsyncSession,
    user_id: UUID,
    report: Report,
    category: str,
) -> bool:
    result = await db.execute(
        select(Notification.id).where(
            and_(
                Notification.user_id == user_id,
                Notification.category == category,
                Notification.resource_type == "report",
                Notification.resource_id == str(report.id),
            )
        )
    )
    return result.first() is not None


async def notify_moderators(db: AsyncSession, report: Report) -> int:
    """
    Alert every active administrator about a report.
    Moderators already alerted for this report are skipped.

    Returns:
        Number of notifications created
    """
    admin_ids = await user_service.get_admin_user_ids(db)
    created = 0

    for admin_id in admin_ids:
        if await _already_notified(db, admin_id, report, MODERATOR_ALERT):
            continue
        db.add(
            Notification(
                user_id=admin_id,
                category=MODERATOR_ALERT,
                title=f"New {report.priority} priority report",
                message=(
                    f"Report #{report.id} ({report.type}) was filed against "
                    f"resource {report.resource_id} and needs review."
                ),
                **_report_link(report),
            )
        )
        created += 1

    if created:
        await db.commit()

    logger.info("Moderators notified for report %s (%d alerts)", report.id, created)
    return created


async def warn_user(db: AsyncSession, user_id: UUID, report: Report) -> None:
    """Send a content warning to a resource author, once per report."""
    if await _already_notified(db, user_id, report, WARNING):
        logger.info("Warning for report %s already issued to user %s", report.id, user_id)
        return

    db.add(
        Notification(
            user_id=user_id,
            category=WARNING,
            title="Content warning",
            message=(
                f"One of your resources was reported for {report.type.replace('_', ' ')} "
                f"and a moderator issued a warning. Notes: {report.resolution_notes or '-'}"
            ),
            **_report_link(report),
        )
    )
    await db.commit()
    logger.info("Warning issued to user %s for report %s", user_id, report.id)
