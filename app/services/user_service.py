"""User collaborator: lookups and account suspension."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User

logger = logging.getLogger(__name__)


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_admin_user_ids(db: AsyncSession) -> list[UUID]:
    """IDs of active administrators (the moderation team)."""
    result = await db.execute(
        select(User.id).where(User.is_admin == True, User.status == "active")
    )
    return list(result.scalars().all())


async def suspend_user(db: AsyncSession, user_id: UUID) -> None:
    """
    Suspend a user account. Suspending a suspended account is a no-op and
    administrators are never suspended.

    Raises:
        LookupError: If the user does not exist
    """
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise LookupError(f"User {user_id} not found")

    if user.is_admin:
        logger.warning("Refusing to suspend administrator %s", user_id)
        return

    if user.status == "suspended":
        logger.info("User %s already suspended", user_id)
        return

    user.status = "suspended"
    user.suspended_at = datetime.now(timezone.utc)
    await db.commit()
    logger.info("User %s suspended", user_id)
