from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_current_admin_user, get_current_user
from app.core.exceptions import AuthorizationError
from app.database import get_db
from app.schemas.report import (
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
)
from app.schemas.user import UserResponse
from app.services import report_service

router = APIRouter(prefix="", tags=["reports"])


@router.get("/types", response_model=list[ReportTypeInfo])
async def get_report_types() -> list[ReportTypeInfo]:
    """List report types with their priority tier."""
    return report_service.list_report_types()


# ==================== Reporter Endpoints ====================


@router.post("/", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    data: ReportCreate,
    request: Request,
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReportResponse:
    """
    Report a resource.

    Validations:
    - Resource must exist
    - Only one pending or reviewing report per resource and reporter
    """
    report = await report_service.submit_report(
        db,
        reporter_id=current_user.id,
        resource_id=data.resource_id,
        report_type=data.type,
        reason=data.reason,
        additional_info=data.additional_info,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return ReportResponse.model_validate(report)


@router.get("/my-reports", response_model=ReportListResponse)
async def get_my_reports(
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    report_status: ReportStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ReportListResponse:
    """Get reports made by current user."""
    reports, total = await report_service.get_user_reports(
        db, current_user.id, report_status, page, per_page
    )

    return ReportListResponse(
        reports=[ReportResponse.model_validate(r) for r in reports],
        total=total,
        page=page,
        per_page=per_page,
    )


# ==================== Admin Endpoints ====================


@router.get("/admin/all", response_model=ReportAdminListResponse)
async def list_reports_admin(
    admin_user: Annotated[UserResponse, Depends(get_current_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    report_status: ReportStatus | None = Query(None, alias="status"),
    report_type: ReportType | None = Query(None, alias="type"),
    priority: ReportPriority | None = Query(None),
    search: str | None = Query(None, max_length=100, description="Search reporter or resource"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ReportAdminListResponse:
    """List reports with filters (admin only)."""
    reports, total = await report_service.get_admin_reports(
        db,
        status=report_status,
        report_type=report_type,
        priority=priority,
        search=search,
        page=page,
        per_page=per_page,
    )

    return ReportAdminListResponse(
        reports=[ReportAdminResponse.model_validate(r) for r in reports],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/admin/statistics", response_model=ReportStatistics)
async def get_report_statistics(
    admin_user: Annotated[UserResponse, Depends(get_current_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
) -> ReportStatistics:
    """Report counts for the moderation dashboard (admin only)."""
    stats = await report_service.get_report_statistics(db, start_date, end_date)
    return ReportStatistics(**stats)


@router.get("/admin/resources/{resource_id}", response_model=ReportAdminListResponse)
async def list_resource_reports(
    resource_id: UUID,
    admin_user: Annotated[UserResponse, Depends(get_current_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    report_status: ReportStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ReportAdminListResponse:
    """List reports filed against one resource (admin only)."""
    reports, total = await report_service.get_resource_reports(
        db, resource_id, report_status, page, per_page
    )

    return ReportAdminListResponse(
        reports=[ReportAdminResponse.model_validate(r) for r in reports],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.patch("/admin/{report_id}/status", response_model=ReportAdminResponse)
async def update_report_status(
    report_id: int,
    data: ReportStatusUpdate,
    admin_user: Annotated[UserResponse, Depends(get_current_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReportAdminResponse:
    """
    Change a report's status (admin only).

    Resolving requires action_taken; the action is then carried out against
    the reported resource or its author.
    """
    report = await report_service.transition_report(
        db,
        report_id,
        data.status,
        moderator_id=admin_user.id,
        resolution_notes=data.resolution_notes,
        action_taken=data.action_taken,
    )
    return ReportAdminResponse.model_validate(report)


@router.delete("/admin/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(
    report_id: int,
    admin_user: Annotated[UserResponse, Depends(get_current_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Response:
    """Permanently delete a report (admin only)."""
    await report_service.delete_report(db, report_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== Shared Endpoints ====================


@router.get("/{report_id}", response_model=ReportAdminResponse | ReportResponse)
async def get_report(
    report_id: int,
    current_user: Annotated[UserResponse, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReportAdminResponse | ReportResponse:
    """Get a report. Reporters see their own reports; admins see everything."""
    report = await report_service.get_report_details(db, report_id)

    if current_user.is_admin:
        return ReportAdminResponse.model_validate(report)

    if report.user_id != current_user.id:
        raise AuthorizationError("You do not have permission to view this report")

    return ReportResponse.model_validate(report)
