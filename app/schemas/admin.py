"""Admin-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuditLogResponse(BaseModel):
    """Schema for an audit trail entry."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    actor_id: UUID | None
    actor_role: str | None
    action: str
    resource_type: str
    resource_id: UUID | None
    old_values: dict | None
    new_values: dict | None
    created_at: datetime


class AuditLogListResponse(BaseModel):
    """Schema for paginated audit log list."""

    logs: list[AuditLogResponse]
    total: int
    page: int
    page_size: int


class OccupancySummary(BaseModel):
    """Dormitory-wide occupancy figures."""

    total_rooms: int
    available_rooms: int
    occupied_rooms: int
    maintenance_rooms: int
    total_capacity: int
    occupied_slots: int
    occupancy_rate: float
    pending_assignments: int
    approved_assignments: int
    active_assignments: int
    pending_payments: int
    inconsistent_rooms: list[UUID]
