"""Payment endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CurrentPrincipal, get_db, require_permission
from app.core.permissions import Permission, Principal
from app.domain.payment_state import PaymentStatus
from app.models.payment import Payment
from app.schemas.payment import (
    PaymentCreate,
    PaymentInstructionsResponse,
    PaymentListResponse,
    PaymentRejectRequest,
    PaymentResponse,
    PaymentVerifyRequest,
)
from app.services.payment_service import payment_service

router = APIRouter()

PaymentVerifier = Annotated[Principal, Depends(require_permission(Permission.VERIFY_PAYMENT))]


@router.get("/instructions", response_model=PaymentInstructionsResponse)
async def get_payment_instructions(
    principal: CurrentPrincipal,
) -> PaymentInstructionsResponse:
    """Where and how to send a GCash payment."""
    return PaymentInstructionsResponse(**payment_service.get_instructions())


@router.post("/", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def submit_payment(
    data: PaymentCreate,
    resident: Annotated[Principal, Depends(require_permission(Permission.SUBMIT_PAYMENT))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Payment:
    """Submit payment evidence for an approved assignment."""
    return await payment_service.submit(db, resident, data)


@router.get("/", response_model=PaymentListResponse)
async def list_payments(
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
    payment_status: Annotated[PaymentStatus | None, Query(alias="status")] = None,
    assignment_id: UUID | None = None,
) -> PaymentListResponse:
    """List payments. Residents only see their own."""
    payments, total = await payment_service.list_payments(
        db, principal, payment_status, assignment_id
    )
    return PaymentListResponse(
        payments=[PaymentResponse.model_validate(p) for p in payments], total=total
    )


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: UUID,
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Payment:
    """Get payment details."""
    return await payment_service.get_payment(db, principal, payment_id)


@router.post("/{payment_id}/verify", response_model=PaymentResponse)
async def verify_payment(
    payment_id: UUID,
    admin: PaymentVerifier,
    db: Annotated[AsyncSession, Depends(get_db)],
    request: PaymentVerifyRequest | None = None,
) -> Payment:
    """Verify a payment and activate its assignment."""
    remarks = request.remarks if request else None
    return await payment_service.verify(db, admin, payment_id, remarks)


@router.post("/{payment_id}/reject", response_model=PaymentResponse)
async def reject_payment(
    payment_id: UUID,
    request: PaymentRejectRequest,
    admin: PaymentVerifier,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Payment:
    """Reject a payment; the resident may submit a new one."""
    return await payment_service.reject(db, admin, payment_id, request.remarks)
