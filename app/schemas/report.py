from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.user import UserBrief


class ReportType(str, Enum):
    inappropriate_content = "inappropriate_content"
    copyright_violation = "copyright_violation"
    spam = "spam"
    misleading_title = "misleading_title"
    wrong_category = "wrong_category"
    broken_file = "broken_file"
    other = "other"


class ReportStatus(str, Enum):
    pending = "pending"
    reviewing = "reviewing"
    resolved = "resolved"
    dismissed = "dismissed"


class ReportPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class ActionTaken(str, Enum):
    no_action = "no_action"
    warning_issued = "warning_issued"
    content_removed = "content_removed"
    user_suspended = "user_suspended"
    content_modified = "content_modified"
    category_changed = "category_changed"


# User-facing schemas
class ReportCreate(BaseModel):
    resource_id: UUID
    type: ReportType
    reason: str = Field(..., min_length=10, max_length=1000)
    additional_info: str | None = Field(None, max_length=2000)


class ResourceBrief(BaseModel):
    id: UUID
    title: str
    format: str | None = None
    status: str

    model_config = {"from_attributes": True}


class ReportResponse(BaseModel):
    id: int
    resource_id: UUID
    resource: ResourceBrief | None = None
    type: str
    reason: str
    additional_info: str | None
    status: str
    priority: str
    created_at: datetime
    resolved_at: datetime | None

    model_config = {"from_attributes": True}


class ReportListResponse(BaseModel):
    reports: list[ReportResponse]
    total: int
    page: int
    per_page: int


class ReportTypeInfo(BaseModel):
    value: ReportType
    label: str
    description: str
    priority: ReportPriority
    auto_review: bool


# Admin schemas
class ReportAdminResponse(BaseModel):
    id: int
    user_id: UUID
    resource_id: UUID
    type: str
    reason: str
    additional_info: str | None
    status: str
    priority: str
    resolved_by: UUID | None
    resolution_notes: str | None
    action_taken: str | None
    resolved_at: datetime | None
    ip_address: str | None
    user_agent: str | None
    created_at: datetime
    reporter: UserBrief | None = None
    resource: ResourceBrief | None = None
    resolver: UserBrief | None = None

    model_config = {"from_attributes": True}


class ReportAdminListResponse(BaseModel):
    reports: list[ReportAdminResponse]
    total: int
    page: int
    per_page: int


class ReportStatusUpdate(BaseModel):
    status: ReportStatus
    resolution_notes: str | None = Field(None, max_length=1000)
    action_taken: ActionTaken | None = None


class ReportStatistics(BaseModel):
    total: int
    pending: int
    reviewing: int
    resolved: int
    dismissed: int
    by_type: dict[str, int]
    by_priority: dict[str, int]
    resolution_rate: float
