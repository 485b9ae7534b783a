import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AccountSuspendedError,
    AuthenticationError,
    InsufficientPermissionsError,
    TokenInvalidError,
)
from app.core.security import decode_access_token
from app.database import get_db
from app.schemas.user import UserResponse
from app.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["auth"])

# Tokens are issued by the platform's auth service; this API only verifies them
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserResponse:
    if credentials is None:
        raise AuthenticationError()

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise TokenInvalidError()

    try:
        user_id = UUID(payload.sub)
    except ValueError:
        raise TokenInvalidError()

    user = await user_service.get_user_by_id(db, user_id)
    if user is None:
        raise TokenInvalidError()

    if user.status == "suspended":
        logger.info("Suspended user %s rejected", user_id)
        raise AccountSuspendedError()

    return UserResponse.model_validate(user)


async def get_current_admin_user(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
) -> UserResponse:
    """Dependency that checks if current user is admin."""
    if not current_user.is_admin:
        raise InsufficientPermissionsError()
    return current_user


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
) -> UserResponse:
    return current_user
