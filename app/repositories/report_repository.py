"""
Data access for reports.

Translates report lifecycle operations into queries. No business rules live
here: status values arrive already validated by the report service.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.exceptions import DuplicateReportError, StoreUnavailableError
from app.models.report import Report
from app.models.resource import Resource
from app.models.user import User
from app.services.report_policy import LIVE_STATUSES

logger = logging.getLogger(__name__)

LIVE_STATUS_VALUES = tuple(s.value for s in LIVE_STATUSES)


async def _execute(db: AsyncSession, statement: Any):
    """Run a statement with the configured timeout."""
    try:
        return await asyncio.wait_for(
            db.execute(statement),
            timeout=settings.DB_QUERY_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(
            "Report query timed out after %.1fs", settings.DB_QUERY_TIMEOUT_SECONDS
        )
        raise StoreUnavailableError()
    except OperationalError as e:
        logger.error("Report store unavailable: %s", e)
        raise StoreUnavailableError()


async def _commit(db: AsyncSession) -> None:
    try:
        await asyncio.wait_for(db.commit(), timeout=settings.DB_QUERY_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error("Report commit timed out")
        await db.rollback()
        raise StoreUnavailableError()
    except OperationalError as e:
        logger.error("Report commit failed: %s", e)
        await db.rollback()
        raise StoreUnavailableError()


def _with_relations(query):
    return query.options(
        selectinload(Report.reporter),
        selectinload(Report.resource),
        selectinload(Report.resolver),
    )


async def _paginate(
    db: AsyncSession,
    query,
    page: int,
    per_page: int,
) -> tuple[list[Report], int]:
    count_query = select(func.count()).select_from(query.subquery())
    total_result = await _execute(db, count_query)
    total = total_result.scalar() or 0

    offset = (page - 1) * per_page
    query = (
        _with_relations(query)
        .order_by(Report.created_at.desc(), Report.id.desc())
        .offset(offset)
        .limit(per_page)
    )

    result = await _execute(db, query)
    reports = list(result.scalars().all())

    return reports, total


async def create_report(db: AsyncSession, **fields: Any) -> Report:
    """
    Insert a report and return it with relations loaded.

    The partial unique index on (user_id, resource_id) for live statuses
    rejects a concurrent duplicate; that surfaces as DuplicateReportError.
    """
    report = Report(**fields)
    db.add(report)
    try:
        await _commit(db)
    except IntegrityError:
        await db.rollback()
        logger.info(
            "Duplicate live report rejected by store (user_id=%s, resource_id=%s)",
            fields.get("user_id"),
            fields.get("resource_id"),
        )
        raise DuplicateReportError()

    return await get_report_by_id(db, report.id)


async def get_report_by_id(db: AsyncSession, report_id: int) -> Report | None:
    """Get report by ID with reporter, resource and resolver loaded."""
    query = _with_relations(
        select(Report).where(Report.id == report_id)
    ).execution_options(populate_existing=True)
    result = await _execute(db, query)
    return result.scalar_one_or_none()


async def get_reports_by_user(
    db: AsyncSession,
    user_id: UUID,
    status: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Report], int]:
    """Get reports made by a user."""
    query = select(Report).where(Report.user_id == user_id)

    if status:
        query = query.where(Report.status == status)

    return await _paginate(db, query, page, per_page)


async def get_reports_by_resource(
    db: AsyncSession,
    resource_id: UUID,
    status: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Report], int]:
    """Get reports filed against a resource."""
    query = select(Report).where(Report.resource_id == resource_id)

    if status:
        query = query.where(Report.status == status)

    return await _paginate(db, query, page, per_page)


async def get_reports_for_admin(
    db: AsyncSession,
    status: str | None = None,
    report_type: str | None = None,
    priority: str | None = None,
    search: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Report], int]:
    """
    Get reports for the moderation dashboard.

    `search` matches reporter name/email and resource title/description,
    case-insensitively.
    """
    query = select(Report)

    if status:
        query = query.where(Report.status == status)
    if report_type:
        query = query.where(Report.type == report_type)
    if priority:
        query = query.where(Report.priority == priority)

    if search:
        pattern = f"%{search}%"
        query = (
            query.join(User, User.id == Report.user_id)
            .join(Resource, Resource.id == Report.resource_id)
            .where(
                or_(
                    User.name.ilike(pattern),
                    User.email.ilike(pattern),
                    Resource.title.ilike(pattern),
                    Resource.description.ilike(pattern),
                )
            )
        )

    return await _paginate(db, query, page, per_page)


async def update_report_status(
    db: AsyncSession,
    report_id: int,
    expected_status: str,
    values: dict[str, Any],
) -> bool:
    """
    Apply status fields only if the report is still in `expected_status`.

    Returns False when another writer changed the status first. A reopen that
    would create a second live report for the same reporter and resource
    raises DuplicateReportError.
    """
    statement = (
        update(Report)
        .where(and_(Report.id == report_id, Report.status == expected_status))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    try:
        result = await _execute(db, statement)
        await _commit(db)
    except IntegrityError:
        await db.rollback()
        raise DuplicateReportError(
            "The reporter already has another open report on this resource"
        )
    return result.rowcount > 0


async def has_user_reported(
    db: AsyncSession,
    user_id: UUID,
    resource_id: UUID,
    exclude_report_id: int | None = None,
) -> bool:
    """Check whether the user has a pending or reviewing report on the resource."""
    query = select(Report.id).where(
        and_(
            Report.user_id == user_id,
            Report.resource_id == resource_id,
            Report.status.in_(LIVE_STATUS_VALUES),
        )
    )
    if exclude_report_id is not None:
        query = query.where(Report.id != exclude_report_id)

    result = await _execute(db, query.limit(1))
    return result.scalar_one_or_none() is not None


async def count_live_reports(
    db: AsyncSession,
    resource_id: UUID,
    report_type: str | None = None,
) -> int:
    """Count pending/reviewing reports against a resource."""
    query = select(func.count(Report.id)).where(
        and_(
            Report.resource_id == resource_id,
            Report.status.in_(LIVE_STATUS_VALUES),
        )
    )
    if report_type:
        query = query.where(Report.type == report_type)

    result = await _execute(db, query)
    return result.scalar() or 0


async def get_report_statistics(
    db: AsyncSession,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> dict[str, Any]:
    """Count reports in total and grouped by status, type and priority."""
    conditions = []
    if start_date:
        conditions.append(Report.created_at >= start_date)
    if end_date:
        conditions.append(Report.created_at <= end_date)

    async def _grouped(column) -> dict[str, int]:
        query = select(column, func.count(Report.id)).group_by(column)
        if conditions:
            query = query.where(and_(*conditions))
        result = await _execute(db, query)
        return {key: count for key, count in result.all()}

    by_status = await _grouped(Report.status)
    by_type = await _grouped(Report.type)
    by_priority = await _grouped(Report.priority)

    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_type": by_type,
        "by_priority": by_priority,
    }


async def delete_report(db: AsyncSession, report_id: int) -> bool:
    """Hard delete a report. Bypasses the status workflow entirely."""
    result = await _execute(db, delete(Report).where(Report.id == report_id))
    await _commit(db)
    return result.rowcount > 0
