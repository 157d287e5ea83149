"""Admin panel endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_permission
from app.core.permissions import Permission, Principal
from app.schemas.admin import AuditLogListResponse, AuditLogResponse, OccupancySummary
from app.services.audit_service import audit_service
from app.services.room_service import room_service

router = APIRouter()


# ============ AUDIT LOGS ============


@router.get("/audit-logs", response_model=AuditLogListResponse)
async def get_audit_logs(
    admin: Annotated[Principal, Depends(require_permission(Permission.VIEW_AUDIT_LOGS))],
    db: Annotated[AsyncSession, Depends(get_db)],
    resource_type: str | None = None,
    resource_id: UUID | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
) -> AuditLogListResponse:
    """Get audit logs, newest first."""
    logs, total = await audit_service.list_logs(db, resource_type, resource_id, page, page_size)
    return AuditLogListResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=total,
        page=page,
        page_size=page_size,
    )


# ============ OCCUPANCY ============


@router.get("/occupancy", response_model=OccupancySummary)
async def get_occupancy(
    admin: Annotated[Principal, Depends(require_permission(Permission.VIEW_REPORTS))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OccupancySummary:
    """Dormitory-wide occupancy, including rooms whose counts drifted."""
    return OccupancySummary(**await room_service.get_occupancy_summary(db))
