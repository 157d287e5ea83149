"""Consistency coordinator.

Keeps a room's occupancy and status consistent with its assignments. This is
the only code that writes ``Room.occupied_count``; every assignment status
change goes through :meth:`ConsistencyCoordinator.transition_assignment` so
occupancy side effects happen together with the transition, or not at all.
"""

import logging
from uuid import UUID

from sqlalchemy import and_, case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import CapacityExceeded, ConflictError, NotFoundError
from app.database import utcnow
from app.domain.assignment_state import (
    OCCUPYING_STATUSES,
    AssignmentStatus,
    assert_assignment_transition,
)
from app.domain.room_state import RoomStatus, derive_status, is_consistent
from app.models.assignment import Assignment
from app.models.payment import Payment
from app.models.room import Room

logger = logging.getLogger(__name__)


class ConsistencyCoordinator:
    """Enforces the cross-entity room/assignment/payment invariants."""

    # ==================== LOADING ====================

    async def get_room(self, db: AsyncSession, room_id: UUID, lock: bool = False) -> Room:
        """Load a room with fresh column values."""
        room = await db.get(Room, room_id, populate_existing=True, with_for_update=lock)
        if room is None:
            raise NotFoundError("Room", str(room_id))
        return room

    async def lock_assignment(self, db: AsyncSession, assignment_id: UUID) -> Assignment:
        """Load an assignment row for update, scoping the transaction to it."""
        result = await db.execute(
            select(Assignment)
            .where(Assignment.id == assignment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            raise NotFoundError("Assignment", str(assignment_id))
        return assignment

    async def lock_payment(self, db: AsyncSession, payment_id: UUID) -> Payment:
        result = await db.execute(
            select(Payment)
            .where(Payment.id == payment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        payment = result.scalar_one_or_none()
        if payment is None:
            raise NotFoundError("Payment", str(payment_id))
        return payment

    # ==================== OCCUPANCY ====================

    async def adjust_occupancy(self, db: AsyncSession, room_id: UUID, delta: int) -> Room:
        """Compare-and-set the room's occupied count by ``delta``.

        The bounds check and the write happen in one UPDATE statement, so two
        concurrent activations cannot both take the last free slot. Status
        follows the count: full rooms become ``occupied``, an ``occupied`` room
        with a free slot becomes ``available``, ``maintenance`` is kept.

        Raises:
            CapacityExceeded: if the new count would leave ``[0, capacity]``
            NotFoundError: if the room does not exist
        """
        new_count = Room.occupied_count + delta
        stmt = (
            update(Room)
            .where(
                Room.id == room_id,
                new_count >= 0,
                new_count <= Room.capacity,
            )
            .values(
                occupied_count=new_count,
                status=case(
                    (Room.status == RoomStatus.MAINTENANCE.value, Room.status),
                    (new_count >= Room.capacity, RoomStatus.OCCUPIED.value),
                    (Room.status == RoomStatus.OCCUPIED.value, RoomStatus.AVAILABLE.value),
                    else_=Room.status,
                ),
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)

        room = await self.get_room(db, room_id)
        if result.rowcount != 1:
            logger.warning(
                "Occupancy change %+d rejected for room %s (%s/%s)",
                delta,
                room.number,
                room.occupied_count,
                room.capacity,
            )
            if delta > 0:
                raise CapacityExceeded(f"Room {room.number} is already at full capacity")
            raise CapacityExceeded(f"Room {room.number} has no occupant to release")

        logger.info(
            "Room %s occupancy %+d -> %s/%s (%s)",
            room.number,
            delta,
            room.occupied_count,
            room.capacity,
            room.status,
        )
        return room

    async def occupy_slot(self, db: AsyncSession, room_id: UUID) -> Room:
        return await self.adjust_occupancy(db, room_id, +1)

    async def release_slot(self, db: AsyncSession, room_id: UUID) -> Room:
        return await self.adjust_occupancy(db, room_id, -1)

    # ==================== TRANSITIONS ====================

    async def transition_assignment(
        self, db: AsyncSession, assignment: Assignment, target: AssignmentStatus
    ) -> str:
        """Move an assignment to ``target`` and apply its occupancy effect.

        Entering ``active`` takes a slot; leaving ``active`` for a terminal
        state frees it. The occupancy write happens before the status is set,
        so a rejected occupancy change leaves the assignment untouched.

        Returns:
            The previous status.
        """
        previous = assignment.status
        target_value = AssignmentStatus(target).value
        assert_assignment_transition(previous, target_value)

        occupied_before = previous in OCCUPYING_STATUSES
        occupied_after = target_value in OCCUPYING_STATUSES
        if occupied_after and not occupied_before:
            await self.occupy_slot(db, assignment.room_id)
        elif occupied_before and not occupied_after:
            await self.release_slot(db, assignment.room_id)

        assignment.status = target_value
        logger.info(
            "Assignment %s: %s -> %s", assignment.reference_number, previous, target_value
        )
        return previous

    # ==================== RECONCILIATION ====================

    async def count_occupying(self, db: AsyncSession, room_id: UUID) -> int:
        result = await db.execute(
            select(func.count(Assignment.id)).where(
                Assignment.room_id == room_id,
                Assignment.status.in_(OCCUPYING_STATUSES),
            )
        )
        return result.scalar() or 0

    async def reconcile_room(self, db: AsyncSession, room_id: UUID) -> tuple[Room, int, str]:
        """Re-derive a room's occupancy from its active assignments.

        Returns:
            ``(room, previous_occupied_count, previous_status)``
        """
        room = await self.get_room(db, room_id, lock=True)
        previous_count, previous_status = room.occupied_count, room.status

        active = await self.count_occupying(db, room_id)
        if active > room.capacity:
            raise ConflictError(
                f"Room {room.number} has {active} active assignments but capacity {room.capacity}"
            )

        room.occupied_count = active
        room.status = derive_status(room.status, active, room.capacity)
        await db.flush()

        if (previous_count, previous_status) != (room.occupied_count, room.status):
            logger.warning(
                "Reconciled room %s: %s/%s (%s) -> %s/%s (%s)",
                room.number,
                previous_count,
                room.capacity,
                previous_status,
                room.occupied_count,
                room.capacity,
                room.status,
            )
        return room, previous_count, previous_status

    async def find_inconsistent_rooms(self, db: AsyncSession) -> list[UUID]:
        """Rooms whose stored count or status breaks an invariant."""
        occupying = (
            select(Assignment.room_id, func.count(Assignment.id).label("active"))
            .where(Assignment.status.in_(OCCUPYING_STATUSES))
            .group_by(Assignment.room_id)
            .subquery()
        )
        result = await db.execute(
            select(Room, func.coalesce(occupying.c.active, 0)).outerjoin(
                occupying, and_(occupying.c.room_id == Room.id)
            )
        )
        inconsistent = []
        for room, active in result.all():
            if active != room.occupied_count or not is_consistent(
                room.status, room.occupied_count, room.capacity
            ):
                inconsistent.append(room.id)
        return inconsistent


coordinator = ConsistencyCoordinator()
