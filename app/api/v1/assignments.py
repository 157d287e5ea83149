"""Room assignment endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CurrentPrincipal, get_db, require_permission
from app.core.permissions import Permission, Principal
from app.domain.assignment_state import AssignmentStatus
from app.models.assignment import Assignment
from app.schemas.assignment import (
    AssignmentActivateRequest,
    AssignmentCancelRequest,
    AssignmentCreate,
    AssignmentDecisionRequest,
    AssignmentListResponse,
    AssignmentQuoteRequest,
    AssignmentQuoteResponse,
    AssignmentResponse,
    CheckoutResponse,
    MyRoomResponse,
)
from app.services.assignment_service import assignment_service

router = APIRouter()


@router.post("/quote", response_model=AssignmentQuoteResponse)
async def quote_assignment(
    request: AssignmentQuoteRequest,
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AssignmentQuoteResponse:
    """Calculate the price of a stay without creating an assignment."""
    return AssignmentQuoteResponse(**await assignment_service.quote(db, request))


@router.post("/", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    data: AssignmentCreate,
    resident: Annotated[Principal, Depends(require_permission(Permission.REQUEST_ASSIGNMENT))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Assignment:
    """Request a room."""
    return await assignment_service.create_assignment(db, resident, data)


@router.get("/", response_model=AssignmentListResponse)
async def list_assignments(
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
    assignment_status: Annotated[AssignmentStatus | None, Query(alias="status")] = None,
    room_id: UUID | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> AssignmentListResponse:
    """List assignments. Residents only see their own."""
    assignments, total = await assignment_service.list_assignments(
        db, principal, assignment_status, room_id, page, page_size
    )
    return AssignmentListResponse(
        assignments=[AssignmentResponse.model_validate(a) for a in assignments],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/pending", response_model=list[AssignmentResponse])
async def list_pending_assignments(
    admin: Annotated[Principal, Depends(require_permission(Permission.REVIEW_ASSIGNMENT))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Assignment]:
    """Requests awaiting review, oldest first."""
    return await assignment_service.list_pending(db)


@router.get("/me", response_model=MyRoomResponse)
async def get_my_room(
    resident: Annotated[Principal, Depends(require_permission(Permission.VIEW_OWN_ASSIGNMENTS))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MyRoomResponse:
    """Current assignment and history of the caller."""
    current, history = await assignment_service.get_my_room(db, resident)
    return MyRoomResponse(
        current_assignment=AssignmentResponse.model_validate(current) if current else None,
        history=[AssignmentResponse.model_validate(a) for a in history],
    )


@router.get("/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: UUID,
    principal: CurrentPrincipal,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Assignment:
    """Get assignment details."""
    return await assignment_service.get_assignment(db, principal, assignment_id)


@router.post("/{assignment_id}/approve", response_model=AssignmentResponse)
async def approve_assignment(
    assignment_id: UUID,
    admin: Annotated[Principal, Depends(require_permission(Permission.REVIEW_ASSIGNMENT))],
    db: Annotated[AsyncSession, Depends(get_db)],
    request: AssignmentDecisionRequest | None = None,
) -> Assignment:
    """Approve a pending request."""
    notes = request.notes if request else None
    return await assignment_service.approve(db, admin, assignment_id, notes)


@router.post("/{assignment_id}/reject", response_model=AssignmentResponse)
async def reject_assignment(
    assignment_id: UUID,
    admin: Annotated[Principal, Depends(require_permission(Permission.REVIEW_ASSIGNMENT))],
    db: Annotated[AsyncSession, Depends(get_db)],
    request: AssignmentDecisionRequest | None = None,
) -> Assignment:
    """Reject a pending request."""
    notes = request.notes if request else None
    return await assignment_service.reject(db, admin, assignment_id, notes)


@router.post("/{assignment_id}/activate", response_model=AssignmentResponse)
async def activate_assignment(
    assignment_id: UUID,
    admin: Annotated[Principal, Depends(require_permission(Permission.ACTIVATE_ASSIGNMENT))],
    db: Annotated[AsyncSession, Depends(get_db)],
    request: AssignmentActivateRequest | None = None,
) -> Assignment:
    """Check the resident in once payment is settled."""
    cash_confirmed = request.cash_confirmed if request else False
    return await assignment_service.activate(db, admin, assignment_id, cash_confirmed)


@router.post("/{assignment_id}/cancel", response_model=AssignmentResponse)
async def cancel_assignment(
    assignment_id: UUID,
    principal: Annotated[Principal, Depends(require_permission(Permission.CANCEL_ASSIGNMENT))],
    db: Annotated[AsyncSession, Depends(get_db)],
    request: AssignmentCancelRequest | None = None,
) -> Assignment:
    """Cancel an approved or active assignment."""
    reason = request.reason if request else None
    return await assignment_service.cancel(db, principal, assignment_id, reason)


@router.post("/{assignment_id}/complete", response_model=AssignmentResponse)
async def complete_assignment(
    assignment_id: UUID,
    admin: Annotated[Principal, Depends(require_permission(Permission.COMPLETE_ASSIGNMENT))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Assignment:
    """Close out a stay."""
    return await assignment_service.complete(db, admin, assignment_id)


@router.post("/{assignment_id}/checkout", response_model=CheckoutResponse)
async def checkout_assignment(
    assignment_id: UUID,
    resident: Annotated[Principal, Depends(require_permission(Permission.CHECKOUT_ASSIGNMENT))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CheckoutResponse:
    """Resident checkout; cancels instead when still within the grace period."""
    assignment, message = await assignment_service.checkout(db, resident, assignment_id)
    return CheckoutResponse(assignment=AssignmentResponse.model_validate(assignment), message=message)


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: UUID,
    admin: Annotated[Principal, Depends(require_permission(Permission.DELETE_ASSIGNMENT))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a closed assignment."""
    await assignment_service.delete_assignment(db, admin, assignment_id)
