"""Assignment-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AssignmentCreate(BaseModel):
    """Schema for requesting a room."""

    room_id: UUID
    start_date: date
    end_date: date
    id_image: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)


class AssignmentQuoteRequest(BaseModel):
    """Schema for pricing a stay without creating an assignment."""

    room_id: UUID
    start_date: date
    end_date: date


class AssignmentQuoteResponse(BaseModel):
    """Schema for a stay price quote."""

    room_id: UUID
    monthly_rate: Decimal
    duration_days: int
    total_price: int
    bookable: bool
    unavailable_reason: str | None = None


class AssignmentDecisionRequest(BaseModel):
    """Schema for approving or rejecting an assignment."""

    notes: str | None = Field(None, max_length=1000)


class AssignmentActivateRequest(BaseModel):
    """Schema for activating an approved assignment.

    ``cash_confirmed`` records that an administrator settled a cash payment
    in person.
    """

    cash_confirmed: bool = False


class AssignmentCancelRequest(BaseModel):
    """Schema for cancelling an assignment."""

    reason: str | None = Field(None, max_length=1000)


class AssignmentResponse(BaseModel):
    """Schema for assignment response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    reference_number: str
    resident_id: UUID
    room_id: UUID

    # Stay
    start_date: date
    end_date: date
    duration_days: int

    # Pricing
    monthly_rate_snapshot: Decimal
    total_price: int

    # Status
    status: str
    notes: str | None
    id_image: str | None

    # Timestamps
    approved_at: datetime | None
    approved_by: UUID | None
    checked_in_at: datetime | None
    checked_out_at: datetime | None
    checked_out_by: UUID | None
    cancelled_at: datetime | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime


class AssignmentListResponse(BaseModel):
    """Schema for paginated assignment list."""

    assignments: list[AssignmentResponse]
    total: int
    page: int
    page_size: int


class MyRoomResponse(BaseModel):
    """Current open assignment of a resident plus their closed history."""

    current_assignment: AssignmentResponse | None
    history: list[AssignmentResponse]


class CheckoutResponse(BaseModel):
    """Schema for a resident checkout outcome."""

    assignment: AssignmentResponse
    message: str
