from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: UUID
    email: str
    name: str
    status: str
    is_admin: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class UserBrief(BaseModel):
    id: UUID
    name: str
    email: str

    model_config = {"from_attributes": True}


class TokenPayload(BaseModel):
    sub: str
    exp: int
