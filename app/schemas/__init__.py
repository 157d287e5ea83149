"""Pydantic schemas for API validation."""

from app.schemas.admin import AuditLogResponse, OccupancySummary
from app.schemas.assignment import (
    AssignmentActivateRequest,
    AssignmentCreate,
    AssignmentResponse,
    MyRoomResponse,
)
from app.schemas.payment import (
    PaymentCreate,
    PaymentInstructionsResponse,
    PaymentResponse,
)
from app.schemas.room import RoomCreate, RoomResponse, RoomUpdate

__all__ = [
    # Room
    "RoomCreate",
    "RoomUpdate",
    "RoomResponse",
    # Assignment
    "AssignmentCreate",
    "AssignmentActivateRequest",
    "AssignmentResponse",
    "MyRoomResponse",
    # Payment
    "PaymentCreate",
    "PaymentResponse",
    "PaymentInstructionsResponse",
    # Admin
    "AuditLogResponse",
    "OccupancySummary",
]
