"""Resource collaborator: existence and visibility of reported resources."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.resource import Resource

logger = logging.getLogger(__name__)

HIDDEN_STATUS = "hidden"


async def get_resource_by_id(db: AsyncSession, resource_id: UUID) -> Resource | None:
    """Get resource by ID."""
    result = await db.execute(select(Resource).where(Resource.id == resource_id))
    return result.scalar_one_or_none()


async def resource_exists(db: AsyncSession, resource_id: UUID) -> bool:
    result = await db.execute(select(Resource.id).where(Resource.id == resource_id))
    return result.scalar_one_or_none() is not None


async def get_resource_author_id(db: AsyncSession, resource_id: UUID) -> UUID | None:
    result = await db.execute(
        select(Resource.author_id).where(Resource.id == resource_id)
    )
    return result.scalar_one_or_none()


async def hide_resource(db: AsyncSession, resource_id: UUID) -> None:
    """
    Unpublish a resource. Hiding an already hidden resource is a no-op.

    Raises:
        LookupError: If the resource does not exist
    """
    resource = await get_resource_by_id(db, resource_id)
    if resource is None:
        raise LookupError(f"Resource {resource_id} not found")

    if resource.status == HIDDEN_STATUS:
        logger.info("Resource %s already hidden", resource_id)
        return

    resource.status = HIDDEN_STATUS
    resource.hidden_at = datetime.now(timezone.utc)
    await db.commit()
    logger.info("Resource %s hidden", resource_id)
