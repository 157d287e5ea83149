"""Payment-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.payment_state import PaymentMethod


class PaymentCreate(BaseModel):
    """Schema for submitting payment evidence."""

    assignment_id: UUID
    method: PaymentMethod
    amount: int = Field(..., ge=0)
    # For GCash transfers
    reference_number: str | None = Field(None, max_length=100)
    proof_image: str | None = Field(None, max_length=500)


class PaymentVerifyRequest(BaseModel):
    """Schema for verifying a payment."""

    remarks: str | None = Field(None, max_length=1000)


class PaymentRejectRequest(BaseModel):
    """Schema for rejecting a payment."""

    remarks: str = Field(..., min_length=1, max_length=1000)


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    assignment_id: UUID
    resident_id: UUID
    amount: int
    method: str
    reference_number: str | None
    proof_image: str | None
    status: str
    remarks: str
    verified_by: UUID | None
    verified_at: datetime | None
    rejected_at: datetime | None
    created_at: datetime
    updated_at: datetime


class PaymentListResponse(BaseModel):
    """Schema for payment list."""

    payments: list[PaymentResponse]
    total: int


class PaymentInstructionsResponse(BaseModel):
    """GCash display identity shown to residents before paying."""

    gcash_name: str
    gcash_number: str
    payment_qr_code: str | None
    payment_instructions: str
    accepted_methods: list[str]
