"""Room assignment lifecycle service."""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    OverlappingRequest,
    PaymentNotVerified,
    RoomUnavailable,
)
from app.core.permissions import Permission, Principal
from app.domain.assignment_state import (
    OPEN_STATUSES,
    TERMINAL_STATUSES,
    AssignmentStatus,
    assert_assignment_transition,
)
from app.domain.checkout_policy import resolve_checkout_status
from app.domain.payment_state import LIVE_STATUSES, PaymentMethod, PaymentStatus
from app.domain.pricing import calculate_duration, calculate_total_price, validate_stay_dates
from app.domain.room_state import RoomStatus
from app.models.assignment import Assignment
from app.models.payment import Payment
from app.schemas.assignment import AssignmentCreate, AssignmentQuoteRequest
from app.services.audit_service import audit_service
from app.services.coordinator import coordinator
from app.utils.reference_number import generate_reference_number

logger = logging.getLogger(__name__)


class AssignmentService:
    """Service for the assignment state machine.

    Every status change goes through the coordinator, which applies the
    occupancy effect of entering or leaving ``active``.
    """

    # ==================== CREATION ====================

    async def quote(self, db: AsyncSession, data: AssignmentQuoteRequest) -> dict:
        """Price a stay without creating anything."""
        validate_stay_dates(data.start_date, data.end_date)
        room = await coordinator.get_room(db, data.room_id)

        duration = calculate_duration(data.start_date, data.end_date)
        total = calculate_total_price(room.monthly_rate, duration, settings.days_per_month)

        unavailable_reason = None
        if room.status == RoomStatus.MAINTENANCE:
            unavailable_reason = "Room is under maintenance"
        elif room.occupied_count >= room.capacity:
            unavailable_reason = "Room is currently full"

        return {
            "room_id": room.id,
            "monthly_rate": room.monthly_rate,
            "duration_days": duration,
            "total_price": total,
            "bookable": room.status != RoomStatus.MAINTENANCE,
            "unavailable_reason": unavailable_reason,
        }

    async def create_assignment(
        self, db: AsyncSession, resident: Principal, data: AssignmentCreate
    ) -> Assignment:
        """Request a room slot for a date range.

        The rate is snapshotted from the room so later rate edits do not
        change the price of an existing request.
        """
        now = datetime.now(UTC)
        validate_stay_dates(data.start_date, data.end_date, today=now.date())

        existing = await self._get_open_assignment(db, resident.id)
        if existing:
            raise OverlappingRequest()

        room = await coordinator.get_room(db, data.room_id)
        if room.status == RoomStatus.MAINTENANCE:
            raise RoomUnavailable(f"Room {room.number} is under maintenance and cannot be booked")

        duration = calculate_duration(data.start_date, data.end_date)
        assignment = Assignment(
            reference_number=await generate_reference_number(db, now),
            resident_id=resident.id,
            room_id=room.id,
            start_date=data.start_date,
            end_date=data.end_date,
            duration_days=duration,
            monthly_rate_snapshot=room.monthly_rate,
            total_price=calculate_total_price(room.monthly_rate, duration, settings.days_per_month),
            status=AssignmentStatus.PENDING.value,
            notes=data.notes,
            id_image=data.id_image,
        )
        db.add(assignment)
        try:
            await db.flush()
        except IntegrityError as exc:
            if "reference_number" in str(exc.orig):
                logger.warning("Reference number %s already taken", assignment.reference_number)
                raise ConflictError("Could not allocate a reference number, please retry")
            # Lost a race against a concurrent request from the same resident
            raise OverlappingRequest()

        await audit_service.log_status_change(
            db,
            resident,
            "assignment_create",
            "assignment",
            assignment.id,
            None,
            assignment.status,
            room_id=str(room.id),
            total_price=assignment.total_price,
        )
        logger.info(
            "Assignment %s requested for room %s (%s days, %s)",
            assignment.reference_number,
            room.number,
            duration,
            assignment.total_price,
        )
        return assignment

    # ==================== TRANSITIONS ====================

    async def approve(
        self, db: AsyncSession, actor: Principal, assignment_id: UUID, notes: str | None = None
    ) -> Assignment:
        """Approve a pending request. Occupancy is untouched until activation."""
        assignment = await coordinator.lock_assignment(db, assignment_id)
        previous = await coordinator.transition_assignment(db, assignment, AssignmentStatus.APPROVED)

        assignment.approved_at = datetime.now(UTC)
        assignment.approved_by = actor.id
        await db.flush()

        await audit_service.log_status_change(
            db, actor, "assignment_approve", "assignment", assignment.id, previous, assignment.status,
            notes=notes,
        )
        return assignment

    async def reject(
        self, db: AsyncSession, actor: Principal, assignment_id: UUID, notes: str | None = None
    ) -> Assignment:
        assignment = await coordinator.lock_assignment(db, assignment_id)
        previous = await coordinator.transition_assignment(db, assignment, AssignmentStatus.REJECTED)
        await db.flush()

        await audit_service.log_status_change(
            db, actor, "assignment_reject", "assignment", assignment.id, previous, assignment.status,
            notes=notes,
        )
        return assignment

    async def activate(
        self,
        db: AsyncSession,
        actor: Principal,
        assignment_id: UUID,
        cash_confirmed: bool = False,
    ) -> Assignment:
        """Check the resident in.

        Requires a verified payment, or an administrator confirming that a
        pending cash payment was settled in person.

        Raises:
            InvalidTransition: if the assignment is not ``approved``
            PaymentNotVerified: if no qualifying payment exists
            CapacityExceeded: if the room has no free slot
        """
        assignment = await coordinator.lock_assignment(db, assignment_id)
        assert_assignment_transition(assignment.status, AssignmentStatus.ACTIVE.value)

        payment = await self.get_live_payment(db, assignment.id)
        if payment is None:
            raise PaymentNotVerified()
        if payment.status != PaymentStatus.VERIFIED:
            cash_settled = (
                cash_confirmed and actor.is_admin and payment.method == PaymentMethod.CASH
            )
            if not cash_settled:
                raise PaymentNotVerified()

        return await self.activate_with_payment(db, actor, assignment, payment, cash_confirmed)

    async def activate_with_payment(
        self,
        db: AsyncSession,
        actor: Principal,
        assignment: Assignment,
        payment: Payment,
        cash_confirmed: bool = False,
    ) -> Assignment:
        """Activate an assignment whose payment requirement is already met."""
        previous = await coordinator.transition_assignment(db, assignment, AssignmentStatus.ACTIVE)
        assignment.checked_in_at = datetime.now(UTC)
        await db.flush()

        await audit_service.log_status_change(
            db, actor, "assignment_activate", "assignment", assignment.id, previous, assignment.status,
            payment_id=str(payment.id),
            cash_confirmed=cash_confirmed or None,
        )
        return assignment

    async def cancel(
        self, db: AsyncSession, actor: Principal, assignment_id: UUID, reason: str | None = None
    ) -> Assignment:
        assignment = await coordinator.lock_assignment(db, assignment_id)
        self._check_access(actor, assignment)
        previous = await coordinator.transition_assignment(db, assignment, AssignmentStatus.CANCELLED)

        assignment.cancelled_at = datetime.now(UTC)
        await db.flush()

        await audit_service.log_status_change(
            db, actor, "assignment_cancel", "assignment", assignment.id, previous, assignment.status,
            reason=reason,
        )
        return assignment

    async def complete(self, db: AsyncSession, actor: Principal, assignment_id: UUID) -> Assignment:
        assignment = await coordinator.lock_assignment(db, assignment_id)
        previous = await coordinator.transition_assignment(db, assignment, AssignmentStatus.COMPLETED)

        assignment.completed_at = datetime.now(UTC)
        await db.flush()

        await audit_service.log_status_change(
            db, actor, "assignment_complete", "assignment", assignment.id, previous, assignment.status
        )
        return assignment

    async def checkout(
        self, db: AsyncSession, actor: Principal, assignment_id: UUID
    ) -> tuple[Assignment, str]:
        """Resident checkout.

        Within the grace window after approval this cancels the stay;
        afterwards it completes it.

        Returns:
            Tuple of (assignment, user-facing message)
        """
        assignment = await coordinator.lock_assignment(db, assignment_id)
        if assignment.resident_id != actor.id:
            raise AuthorizationError("You can only check out of your own assignment")

        now = datetime.now(UTC)
        target = resolve_checkout_status(
            assignment.approved_at, assignment.created_at, now, settings.checkout_grace_hours
        )
        previous = await coordinator.transition_assignment(db, assignment, target)

        assignment.checked_out_at = now
        assignment.checked_out_by = actor.id
        if target == AssignmentStatus.CANCELLED:
            assignment.cancelled_at = now
            message = "Booking cancelled within the grace period"
        else:
            assignment.completed_at = now
            message = "Checked out successfully"
        await db.flush()

        await audit_service.log_status_change(
            db, actor, "assignment_checkout", "assignment", assignment.id, previous, assignment.status
        )
        return assignment, message

    # ==================== QUERIES ====================

    async def get_assignment(
        self, db: AsyncSession, principal: Principal, assignment_id: UUID
    ) -> Assignment:
        assignment = await db.get(Assignment, assignment_id)
        if not assignment:
            raise NotFoundError("Assignment", str(assignment_id))
        self._check_access(principal, assignment)
        return assignment

    async def list_assignments(
        self,
        db: AsyncSession,
        principal: Principal,
        status: AssignmentStatus | None = None,
        room_id: UUID | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Assignment], int]:
        """List assignments; residents only ever see their own."""
        query = select(Assignment)
        if not principal.can(Permission.VIEW_ALL_ASSIGNMENTS):
            query = query.where(Assignment.resident_id == principal.id)
        if status:
            query = query.where(Assignment.status == AssignmentStatus(status).value)
        if room_id:
            query = query.where(Assignment.room_id == room_id)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        offset = (page - 1) * page_size
        result = await db.execute(
            query.order_by(Assignment.created_at.desc()).offset(offset).limit(page_size)
        )
        return list(result.scalars().all()), total

    async def list_pending(self, db: AsyncSession) -> list[Assignment]:
        result = await db.execute(
            select(Assignment)
            .where(Assignment.status == AssignmentStatus.PENDING.value)
            .order_by(Assignment.created_at)
        )
        return list(result.scalars().all())

    async def get_my_room(
        self, db: AsyncSession, resident: Principal
    ) -> tuple[Assignment | None, list[Assignment]]:
        """Current open assignment and closed history of a resident."""
        current = await self._get_open_assignment(db, resident.id)
        result = await db.execute(
            select(Assignment)
            .where(
                Assignment.resident_id == resident.id,
                Assignment.status.in_(TERMINAL_STATUSES),
            )
            .order_by(Assignment.created_at.desc())
        )
        return current, list(result.scalars().all())

    async def get_live_payment(self, db: AsyncSession, assignment_id: UUID) -> Payment | None:
        """The pending or verified payment of an assignment, if any."""
        result = await db.execute(
            select(Payment).where(
                Payment.assignment_id == assignment_id,
                Payment.status.in_(LIVE_STATUSES),
            )
        )
        return result.scalar_one_or_none()

    # ==================== ADMIN ====================

    async def delete_assignment(
        self, db: AsyncSession, actor: Principal, assignment_id: UUID
    ) -> None:
        """Delete a closed assignment and its payments."""
        assignment = await coordinator.lock_assignment(db, assignment_id)
        if assignment.status not in TERMINAL_STATUSES:
            raise ConflictError(
                f"Assignment {assignment.reference_number} is {assignment.status}; "
                "only rejected, cancelled or completed assignments can be deleted"
            )

        await db.execute(delete(Payment).where(Payment.assignment_id == assignment.id))
        await audit_service.log_action(
            db,
            actor,
            "assignment_delete",
            "assignment",
            assignment.id,
            old_values={
                "reference_number": assignment.reference_number,
                "status": assignment.status,
                "resident_id": str(assignment.resident_id),
                "room_id": str(assignment.room_id),
            },
        )
        await db.execute(delete(Assignment).where(Assignment.id == assignment.id))
        logger.info("Assignment %s deleted", assignment.reference_number)

    # ==================== HELPERS ====================

    async def _get_open_assignment(
        self, db: AsyncSession, resident_id: UUID
    ) -> Assignment | None:
        result = await db.execute(
            select(Assignment).where(
                Assignment.resident_id == resident_id,
                Assignment.status.in_(OPEN_STATUSES),
            )
        )
        return result.scalar_one_or_none()

    def _check_access(self, principal: Principal, assignment: Assignment) -> None:
        if assignment.resident_id != principal.id and not principal.can(
            Permission.VIEW_ALL_ASSIGNMENTS
        ):
            raise AuthorizationError("You don't have access to this assignment")


assignment_service = AssignmentService()
