"""
Service-level fixtures: drive assignments through their lifecycle
"""
from uuid import uuid4

import pytest

from app.core.permissions import Principal, UserRole
from app.models.assignment import Assignment
from app.models.payment import Payment
from app.models.room import Room
from app.schemas.assignment import AssignmentCreate
from app.schemas.payment import PaymentCreate
from app.services.assignment_service import assignment_service
from app.services.payment_service import payment_service


class BookingFlow:
    """Each step commits, like a request boundary would."""

    def __init__(self, db, admin: Principal, stay_dates):
        self.db = db
        self.admin = admin
        self.start_date, self.end_date = stay_dates

    def new_resident(self) -> Principal:
        return Principal(id=uuid4(), role=UserRole.RESIDENT)

    async def request(self, resident: Principal, room: Room, **kwargs) -> Assignment:
        data = AssignmentCreate(
            room_id=room.id,
            start_date=kwargs.pop("start_date", self.start_date),
            end_date=kwargs.pop("end_date", self.end_date),
            **kwargs,
        )
        assignment = await assignment_service.create_assignment(self.db, resident, data)
        await self.db.commit()
        return assignment

    async def approved(self, resident: Principal, room: Room) -> Assignment:
        assignment = await self.request(resident, room)
        await assignment_service.approve(self.db, self.admin, assignment.id)
        await self.db.commit()
        return assignment

    async def pay(self, resident: Principal, assignment: Assignment, method: str = "gcash") -> Payment:
        data = PaymentCreate(
            assignment_id=assignment.id,
            method=method,
            amount=assignment.total_price,
            reference_number="GC1234567890" if method == "gcash" else None,
            proof_image="payments/proof.png" if method == "gcash" else None,
        )
        payment = await payment_service.submit(self.db, resident, data)
        await self.db.commit()
        return payment

    async def paid(self, resident: Principal, room: Room, method: str = "gcash") -> tuple[Assignment, Payment]:
        assignment = await self.approved(resident, room)
        payment = await self.pay(resident, assignment, method)
        return assignment, payment

    async def activated(self, resident: Principal, room: Room) -> Assignment:
        assignment, payment = await self.paid(resident, room)
        await payment_service.verify(self.db, self.admin, payment.id)
        await self.db.commit()
        return assignment

    async def reload(self, model, ident):
        return await self.db.get(model, ident, populate_existing=True)


@pytest.fixture
def flow(db_session, admin, stay_dates):
    return BookingFlow(db_session, admin, stay_dates)
