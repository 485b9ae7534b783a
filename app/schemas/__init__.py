from app.schemas.report import (
    ActionTaken,
    ReportAdminListResponse,
    ReportAdminResponse,
    ReportCreate,
    ReportListResponse,
    ReportPriority,
    ReportResponse,
    ReportStatistics,
    ReportStatus,
    ReportStatusUpdate,
    ReportType,
    ReportTypeInfo,
    ResourceBrief,
)
from app.schemas.user import TokenPayload, UserBrief, UserResponse

__all__ = [
    "UserResponse",
    "UserBrief",
    "TokenPayload",
    "ReportType",
    "ReportStatus",
    "ReportPriority",
    "ActionTaken",
    "ReportCreate",
    "ReportResponse",
    "ReportListResponse",
    "ReportTypeInfo",
    "ReportAdminResponse",
    "ReportAdminListResponse",
    "ReportStatusUpdate",
    "ReportStatistics",
    "ResourceBrief",
]
