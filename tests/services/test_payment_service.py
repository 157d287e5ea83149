"""
Payment verification workflow tests
"""
import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    ActivationConflict,
    AmountMismatch,
    AssignmentNotApproved,
    AuthorizationError,
    ConflictError,
    DuplicatePayment,
    InvalidTransition,
    MissingProof,
)
from app.models.assignment import Assignment
from app.models.payment import Payment
from app.models.room import Room
from app.schemas.payment import PaymentCreate
from app.services.assignment_service import assignment_service
from app.services.payment_service import payment_service


class TestSubmit:

    async def test_creates_pending_payment(self, flow, room, resident):
        assignment = await flow.approved(resident, room)

        payment = await flow.pay(resident, assignment)

        assert payment.status == "pending"
        assert payment.amount == assignment.total_price
        assert payment.resident_id == resident.id
        assert payment.method == "gcash"

    async def test_assignment_must_be_approved(self, db_session, flow, room, resident):
        assignment = await flow.request(resident, room)

        with pytest.raises(AssignmentNotApproved):
            await flow.pay(resident, assignment)

    async def test_amount_must_match_total(self, db_session, flow, room, resident):
        assignment = await flow.approved(resident, room)

        with pytest.raises(AmountMismatch) as exc_info:
            await payment_service.submit(
                db_session,
                resident,
                PaymentCreate(assignment_id=assignment.id, method="cash", amount=assignment.total_price - 1),
            )
        assert exc_info.value.status_code == 422
        assert exc_info.value.kind == "validation_error"

    async def test_gcash_requires_proof(self, db_session, flow, room, resident):
        assignment = await flow.approved(resident, room)

        with pytest.raises(MissingProof):
            await payment_service.submit(
                db_session,
                resident,
                PaymentCreate(
                    assignment_id=assignment.id,
                    method="gcash",
                    amount=assignment.total_price,
                    reference_number="GC123",
                ),
            )

    async def test_cash_needs_no_proof(self, flow, room, resident):
        assignment = await flow.approved(resident, room)

        payment = await flow.pay(resident, assignment, method="cash")

        assert payment.proof_image is None

    async def test_duplicate_submission(self, flow, room, resident):
        assignment = await flow.approved(resident, room)
        await flow.pay(resident, assignment)

        with pytest.raises(DuplicatePayment) as exc_info:
            await flow.pay(resident, assignment)
        assert isinstance(exc_info.value, ConflictError)

    async def test_only_owner_can_pay(self, flow, room, resident, other_resident):
        assignment = await flow.approved(resident, room)

        with pytest.raises(AuthorizationError):
            await flow.pay(other_resident, assignment)

    async def test_live_payment_index(self, db_session, flow, room, resident):
        assignment, payment = await flow.paid(resident, room)
        db_session.add(
            Payment(
                assignment_id=assignment.id,
                resident_id=resident.id,
                amount=payment.amount,
                method="cash",
                status="pending",
            )
        )

        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()

    async def test_resubmit_after_rejection(self, db_session, flow, room, admin, resident):
        assignment, payment = await flow.paid(resident, room)
        await payment_service.reject(db_session, admin, payment.id, "Reference not found")
        await db_session.commit()

        assert (await flow.reload(Assignment, assignment.id)).status == "approved"
        retry = await flow.pay(resident, assignment)
        assert retry.status == "pending"
        assert retry.id != payment.id


class TestVerify:

    async def test_activates_assignment(self, db_session, flow, room, admin, resident):
        assignment, payment = await flow.paid(resident, room)

        verified = await payment_service.verify(db_session, admin, payment.id, "Matched")
        await db_session.commit()

        assert verified.status == "verified"
        assert verified.verified_by == admin.id
        assert verified.verified_at is not None
        assert verified.remarks == "Matched"
        assert (await flow.reload(Assignment, assignment.id)).status == "active"
        assert (await flow.reload(Room, room.id)).occupied_count == 1

    async def test_last_slot_race(self, db_session, flow, single_room, admin):
        first, first_payment = await flow.paid(flow.new_resident(), single_room)
        second, second_payment = await flow.paid(flow.new_resident(), single_room)

        await payment_service.verify(db_session, admin, first_payment.id)
        await db_session.commit()

        with pytest.raises(ActivationConflict):
            await payment_service.verify(db_session, admin, second_payment.id)

        assert (await flow.reload(Payment, second_payment.id)).status == "pending"
        assert (await flow.reload(Assignment, second.id)).status == "approved"
        room = await flow.reload(Room, single_room.id)
        assert (room.occupied_count, room.status) == (1, "occupied")

    async def test_verified_is_immutable(self, db_session, flow, room, admin, resident):
        assignment = await flow.activated(resident, room)
        payments, _ = await payment_service.list_payments(db_session, admin, assignment_id=assignment.id)
        payment_id = payments[0].id

        with pytest.raises(InvalidTransition):
            await payment_service.verify(db_session, admin, payment_id)
        with pytest.raises(InvalidTransition):
            await payment_service.reject(db_session, admin, payment_id, "changed my mind")

    async def test_settles_cash_after_confirmation(self, db_session, flow, room, admin, resident):
        assignment, payment = await flow.paid(resident, room, method="cash")
        await assignment_service.activate(db_session, admin, assignment.id, cash_confirmed=True)
        await db_session.commit()

        verified = await payment_service.verify(db_session, admin, payment.id)
        await db_session.commit()

        assert verified.status == "verified"
        assert (await flow.reload(Room, room.id)).occupied_count == 1

    async def test_closed_assignment(self, db_session, flow, room, admin, resident):
        assignment, payment = await flow.paid(resident, room)
        await assignment_service.cancel(db_session, resident, assignment.id)
        await db_session.commit()

        with pytest.raises(ActivationConflict):
            await payment_service.verify(db_session, admin, payment.id)


class TestReject:

    async def test_reject_pending(self, db_session, flow, room, admin, resident):
        _, payment = await flow.paid(resident, room)

        rejected = await payment_service.reject(db_session, admin, payment.id, "Blurry screenshot")

        assert rejected.status == "rejected"
        assert rejected.rejected_at is not None
        assert rejected.remarks == "Blurry screenshot"

    async def test_cash_payment_backing_active_stay(self, db_session, flow, room, admin, resident):
        assignment, payment = await flow.paid(resident, room, method="cash")
        await assignment_service.activate(db_session, admin, assignment.id, cash_confirmed=True)
        await db_session.commit()

        with pytest.raises(InvalidTransition):
            await payment_service.reject(db_session, admin, payment.id, "Cash never handed over")

        assert (await flow.reload(Payment, payment.id)).status == "pending"
        assert (await flow.reload(Assignment, assignment.id)).status == "active"

    async def test_reject_twice(self, db_session, flow, room, admin, resident):
        _, payment = await flow.paid(resident, room)
        await payment_service.reject(db_session, admin, payment.id, "no")
        await db_session.commit()

        with pytest.raises(InvalidTransition):
            await payment_service.reject(db_session, admin, payment.id, "no")


class TestQueries:

    async def test_list_scoped_to_resident(self, db_session, flow, room, admin, resident, other_resident):
        await flow.paid(resident, room)
        await flow.paid(other_resident, room)

        mine, total = await payment_service.list_payments(db_session, resident)
        assert total == 1
        assert mine[0].resident_id == resident.id

        _, total = await payment_service.list_payments(db_session, admin, status="pending")
        assert total == 2

    async def test_get_payment_access(self, db_session, flow, room, resident, other_resident):
        _, payment = await flow.paid(resident, room)

        assert (await payment_service.get_payment(db_session, resident, payment.id)).id == payment.id
        with pytest.raises(AuthorizationError):
            await payment_service.get_payment(db_session, other_resident, payment.id)

    def test_instructions(self):
        instructions = payment_service.get_instructions()

        assert instructions["accepted_methods"] == ["gcash", "cash"]
        assert "payment_instructions" in instructions
