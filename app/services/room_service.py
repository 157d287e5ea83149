"""Room inventory service."""

import logging
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.permissions import Principal
from app.domain.assignment_state import OPEN_STATUSES, AssignmentStatus
from app.domain.payment_state import PaymentStatus
from app.domain.room_state import (
    RoomStatus,
    assert_capacity_change,
    assert_room_status_change,
    derive_status,
)
from app.models.assignment import Assignment
from app.models.payment import Payment
from app.models.room import Room
from app.schemas.room import RoomCreate, RoomUpdate
from app.services.audit_service import audit_service
from app.services.coordinator import coordinator

logger = logging.getLogger(__name__)


def _snapshot(room: Room) -> dict:
    return {
        "number": room.number,
        "floor": room.floor,
        "capacity": room.capacity,
        "room_type": room.room_type,
        "monthly_rate": str(room.monthly_rate),
        "status": room.status,
        "occupied_count": room.occupied_count,
    }


class RoomService:
    """Service for the room inventory.

    Occupancy is never written here; see :mod:`app.services.coordinator`.
    """

    async def create_room(self, db: AsyncSession, actor: Principal, data: RoomCreate) -> Room:
        await self._ensure_number_free(db, data.number)

        room = Room(
            number=data.number,
            floor=data.floor,
            capacity=data.capacity,
            room_type=data.room_type.value,
            monthly_rate=data.monthly_rate,
            status=data.status.value,
            occupied_count=0,
            description=data.description,
            amenities=data.amenities,
            images=data.images,
        )
        db.add(room)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(f"Room number {data.number} already exists")

        await audit_service.log_action(
            db, actor, "room_create", "room", room.id, new_values=_snapshot(room)
        )
        logger.info("Room %s created (capacity %s)", room.number, room.capacity)
        return room

    async def update_room(
        self, db: AsyncSession, actor: Principal, room_id: UUID, data: RoomUpdate
    ) -> Room:
        """Apply a partial edit.

        A requested status is checked against the target capacity, and when
        only the capacity changes the status is re-derived from it.
        """
        room = await coordinator.get_room(db, room_id, lock=True)
        before = _snapshot(room)
        changes = data.model_dump(exclude_unset=True)

        capacity = changes.get("capacity") or room.capacity
        if "capacity" in changes:
            assert_capacity_change(room.occupied_count, capacity)

        if changes.get("status") is not None:
            status = RoomStatus(changes["status"]).value
            assert_room_status_change(room.occupied_count, capacity, status)
        else:
            status = derive_status(room.status, room.occupied_count, capacity)

        if changes.get("number") and changes["number"] != room.number:
            await self._ensure_number_free(db, changes["number"])
            room.number = changes["number"]

        if changes.get("floor") is not None:
            room.floor = changes["floor"]
        if changes.get("room_type") is not None:
            room.room_type = changes["room_type"].value
        if changes.get("monthly_rate") is not None:
            room.monthly_rate = changes["monthly_rate"]
        if changes.get("description") is not None:
            room.description = changes["description"]
        if changes.get("amenities") is not None:
            room.amenities = changes["amenities"]
        if changes.get("images") is not None:
            room.images = changes["images"]
        room.capacity = capacity
        room.status = status

        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(f"Room number {room.number} already exists")

        await audit_service.log_action(
            db, actor, "room_update", "room", room.id, old_values=before, new_values=_snapshot(room)
        )
        return room

    async def set_status(
        self, db: AsyncSession, actor: Principal, room_id: UUID, status: RoomStatus
    ) -> Room:
        room = await coordinator.get_room(db, room_id, lock=True)
        target = RoomStatus(status).value
        assert_room_status_change(room.occupied_count, room.capacity, target)

        previous = room.status
        room.status = target
        await db.flush()

        await audit_service.log_status_change(
            db, actor, "room_status_change", "room", room.id, previous, target
        )
        logger.info("Room %s status: %s -> %s", room.number, previous, target)
        return room

    async def delete_room(self, db: AsyncSession, actor: Principal, room_id: UUID) -> None:
        """Delete a room along with its closed booking history."""
        room = await coordinator.get_room(db, room_id, lock=True)

        open_count = await db.execute(
            select(func.count(Assignment.id)).where(
                Assignment.room_id == room_id,
                Assignment.status.in_(OPEN_STATUSES),
            )
        )
        if (open_count.scalar() or 0) > 0 or room.occupied_count > 0:
            raise ConflictError(
                f"Room {room.number} has open assignments or occupants and cannot be deleted"
            )

        closed_ids = select(Assignment.id).where(Assignment.room_id == room_id)
        await db.execute(delete(Payment).where(Payment.assignment_id.in_(closed_ids)))
        await db.execute(delete(Assignment).where(Assignment.room_id == room_id))

        await audit_service.log_action(
            db, actor, "room_delete", "room", room.id, old_values=_snapshot(room)
        )
        await db.execute(delete(Room).where(Room.id == room_id))
        logger.info("Room %s deleted", room.number)

    async def get_room(self, db: AsyncSession, room_id: UUID) -> Room:
        room = await db.get(Room, room_id)
        if not room:
            raise NotFoundError("Room", str(room_id))
        return room

    async def list_rooms(
        self, db: AsyncSession, status: RoomStatus | None = None
    ) -> tuple[list[Room], int]:
        query = select(Room)
        if status:
            query = query.where(Room.status == RoomStatus(status).value)
        result = await db.execute(query.order_by(Room.floor, Room.number))
        rooms = list(result.scalars().all())
        return rooms, len(rooms)

    async def list_available_rooms(self, db: AsyncSession) -> tuple[list[Room], int]:
        """Rooms that can take a new assignment right now."""
        result = await db.execute(
            select(Room)
            .where(
                Room.status == RoomStatus.AVAILABLE.value,
                Room.occupied_count < Room.capacity,
            )
            .order_by(Room.floor, Room.number)
        )
        rooms = list(result.scalars().all())
        return rooms, len(rooms)

    async def reconcile_room(
        self, db: AsyncSession, actor: Principal, room_id: UUID
    ) -> tuple[Room, int, str]:
        room, previous_count, previous_status = await coordinator.reconcile_room(db, room_id)
        if (previous_count, previous_status) != (room.occupied_count, room.status):
            await audit_service.log_action(
                db,
                actor,
                "room_reconcile",
                "room",
                room.id,
                old_values={"occupied_count": previous_count, "status": previous_status},
                new_values={"occupied_count": room.occupied_count, "status": room.status},
            )
        return room, previous_count, previous_status

    async def get_occupancy_summary(self, db: AsyncSession) -> dict:
        """Dormitory-wide occupancy figures for the admin dashboard."""
        rooms_result = await db.execute(
            select(
                Room.status,
                func.count(Room.id),
                func.coalesce(func.sum(Room.capacity), 0),
                func.coalesce(func.sum(Room.occupied_count), 0),
            ).group_by(Room.status)
        )
        by_status = {status: 0 for status in RoomStatus}
        total_capacity = occupied_slots = 0
        for status, count, capacity, occupied in rooms_result.all():
            by_status[RoomStatus(status)] = count
            total_capacity += capacity
            occupied_slots += occupied

        assignments_result = await db.execute(
            select(Assignment.status, func.count(Assignment.id)).group_by(Assignment.status)
        )
        assignment_counts = dict(assignments_result.all())

        payments_result = await db.execute(
            select(func.count(Payment.id)).where(Payment.status == PaymentStatus.PENDING.value)
        )

        return {
            "total_rooms": sum(by_status.values()),
            "available_rooms": by_status[RoomStatus.AVAILABLE],
            "occupied_rooms": by_status[RoomStatus.OCCUPIED],
            "maintenance_rooms": by_status[RoomStatus.MAINTENANCE],
            "total_capacity": total_capacity,
            "occupied_slots": occupied_slots,
            "occupancy_rate": round(occupied_slots / total_capacity, 4) if total_capacity else 0.0,
            "pending_assignments": assignment_counts.get(AssignmentStatus.PENDING.value, 0),
            "approved_assignments": assignment_counts.get(AssignmentStatus.APPROVED.value, 0),
            "active_assignments": assignment_counts.get(AssignmentStatus.ACTIVE.value, 0),
            "pending_payments": payments_result.scalar() or 0,
            "inconsistent_rooms": await coordinator.find_inconsistent_rooms(db),
        }

    async def _ensure_number_free(self, db: AsyncSession, number: str) -> None:
        result = await db.execute(select(Room.id).where(Room.number == number))
        if result.scalar_one_or_none() is not None:
            raise ConflictError(f"Room number {number} already exists")


room_service = RoomService()
