"""Payment verification service."""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    ActivationConflict,
    AmountMismatch,
    AssignmentNotApproved,
    AuthorizationError,
    CapacityExceeded,
    DuplicatePayment,
    InvalidTransition,
    MissingProof,
    NotFoundError,
)
from app.core.permissions import Permission, Principal
from app.domain.assignment_state import AssignmentStatus
from app.domain.payment_state import (
    PaymentMethod,
    PaymentStatus,
    assert_payment_transition,
    requires_proof,
)
from app.models.payment import Payment
from app.schemas.payment import PaymentCreate
from app.services.assignment_service import assignment_service
from app.services.audit_service import audit_service
from app.services.coordinator import coordinator

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for payment submission and verification."""

    async def submit(self, db: AsyncSession, resident: Principal, data: PaymentCreate) -> Payment:
        """Submit payment evidence for an approved assignment.

        Raises:
            AuthorizationError: if the caller does not own the assignment
            AssignmentNotApproved: if the assignment is not ``approved``
            AmountMismatch: if the amount differs from the assignment total
            MissingProof: if a GCash payment lacks its reference or screenshot
            DuplicatePayment: if a pending or verified payment already exists
        """
        assignment = await coordinator.lock_assignment(db, data.assignment_id)
        if assignment.resident_id != resident.id:
            raise AuthorizationError("You can only pay for your own assignment")
        if assignment.status != AssignmentStatus.APPROVED:
            raise AssignmentNotApproved()
        if data.amount != assignment.total_price:
            raise AmountMismatch(assignment.total_price, data.amount)
        if requires_proof(data.method) and not (data.reference_number and data.proof_image):
            raise MissingProof()

        if await assignment_service.get_live_payment(db, assignment.id):
            raise DuplicatePayment()

        payment = Payment(
            assignment_id=assignment.id,
            resident_id=resident.id,
            amount=data.amount,
            method=data.method.value,
            reference_number=data.reference_number,
            proof_image=data.proof_image,
            status=PaymentStatus.PENDING.value,
        )
        db.add(payment)
        try:
            await db.flush()
        except IntegrityError:
            raise DuplicatePayment()

        await audit_service.log_status_change(
            db,
            resident,
            "payment_submit",
            "payment",
            payment.id,
            None,
            payment.status,
            assignment_id=str(assignment.id),
            method=payment.method,
            amount=payment.amount,
        )
        logger.info(
            "Payment %s submitted for assignment %s (%s, %s)",
            payment.id,
            assignment.reference_number,
            payment.method,
            payment.amount,
        )
        return payment

    async def verify(
        self, db: AsyncSession, actor: Principal, payment_id: UUID, remarks: str | None = None
    ) -> Payment:
        """Verify a pending payment and activate its assignment.

        Activation runs first; if the room has no free slot the payment is
        left ``pending`` and the assignment ``approved``. A cash payment whose
        assignment an administrator already activated is only marked settled.

        Raises:
            InvalidTransition: if the payment is not ``pending``
            ActivationConflict: if the assignment cannot be activated
        """
        payment = await coordinator.lock_payment(db, payment_id)
        assert_payment_transition(payment.status, PaymentStatus.VERIFIED.value)

        assignment = await coordinator.lock_assignment(db, payment.assignment_id)
        if assignment.status == AssignmentStatus.APPROVED:
            try:
                await assignment_service.activate_with_payment(db, actor, assignment, payment)
            except (CapacityExceeded, InvalidTransition) as exc:
                logger.warning(
                    "Verification of payment %s aborted: %s", payment.id, exc.detail
                )
                raise ActivationConflict(
                    f"Payment could not be verified because the assignment could not be "
                    f"activated: {exc.detail}"
                ) from exc
        elif not (
            assignment.status == AssignmentStatus.ACTIVE and payment.method == PaymentMethod.CASH
        ):
            raise ActivationConflict(
                f"Payment could not be verified because the assignment is {assignment.status}"
            )

        previous = payment.status
        payment.status = PaymentStatus.VERIFIED.value
        payment.verified_by = actor.id
        payment.verified_at = datetime.now(UTC)
        if remarks:
            payment.remarks = remarks
        await db.flush()

        await audit_service.log_status_change(
            db, actor, "payment_verify", "payment", payment.id, previous, payment.status,
            assignment_id=str(assignment.id),
        )
        logger.info("Payment %s verified by %s", payment.id, actor.id)
        return payment

    async def reject(
        self, db: AsyncSession, actor: Principal, payment_id: UUID, remarks: str
    ) -> Payment:
        """Reject a pending payment; the assignment stays ``approved``.

        Raises:
            InvalidTransition: if the payment is not ``pending``, or its
                assignment was already activated on the strength of it
        """
        payment = await coordinator.lock_payment(db, payment_id)
        assert_payment_transition(payment.status, PaymentStatus.REJECTED.value)

        assignment = await coordinator.lock_assignment(db, payment.assignment_id)
        if assignment.status == AssignmentStatus.ACTIVE:
            raise InvalidTransition(
                "payment",
                payment.status,
                PaymentStatus.REJECTED.value,
                "its assignment is already active",
            )

        previous = payment.status
        payment.status = PaymentStatus.REJECTED.value
        payment.rejected_at = datetime.now(UTC)
        payment.remarks = remarks
        await db.flush()

        await audit_service.log_status_change(
            db, actor, "payment_reject", "payment", payment.id, previous, payment.status,
            remarks=remarks,
        )
        logger.info("Payment %s rejected by %s", payment.id, actor.id)
        return payment

    async def get_payment(self, db: AsyncSession, principal: Principal, payment_id: UUID) -> Payment:
        payment = await db.get(Payment, payment_id)
        if not payment:
            raise NotFoundError("Payment", str(payment_id))
        if payment.resident_id != principal.id and not principal.can(Permission.VIEW_ALL_PAYMENTS):
            raise AuthorizationError("You don't have access to this payment")
        return payment

    async def list_payments(
        self,
        db: AsyncSession,
        principal: Principal,
        status: PaymentStatus | None = None,
        assignment_id: UUID | None = None,
    ) -> tuple[list[Payment], int]:
        query = select(Payment)
        if not principal.can(Permission.VIEW_ALL_PAYMENTS):
            query = query.where(Payment.resident_id == principal.id)
        if status:
            query = query.where(Payment.status == PaymentStatus(status).value)
        if assignment_id:
            query = query.where(Payment.assignment_id == assignment_id)

        result = await db.execute(query.order_by(Payment.created_at.desc()))
        payments = list(result.scalars().all())
        return payments, len(payments)

    def get_instructions(self) -> dict:
        """GCash display identity from configuration."""
        return {
            "gcash_name": settings.gcash_name,
            "gcash_number": settings.gcash_number,
            "payment_qr_code": settings.gcash_qr_code,
            "payment_instructions": settings.payment_instructions,
            "accepted_methods": [method.value for method in PaymentMethod],
        }


payment_service = PaymentService()
