"""Room status rules.

A room's status is tied to its occupancy:

- ``occupied`` only when ``occupied_count == capacity``
- ``available`` only when ``occupied_count < capacity``
- ``maintenance`` regardless of occupancy; blocks new assignments
"""

from enum import Enum

from app.core.exceptions import CapacityExceeded, InvalidCapacityChange, InvalidTransition


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class RoomType(str, Enum):
    STANDARD = "Standard"
    SINGLE = "Single"
    DOUBLE = "Double"
    SUITE = "Suite"


MIN_CAPACITY = 1
MAX_CAPACITY = 6
ROOM_NUMBER_PATTERN = r"^[A-Z0-9-]+$"


def assert_room_status_change(occupied_count: int, capacity: int, target: str) -> None:
    """Reject a manual status change that contradicts the occupancy facts."""
    target = RoomStatus(target)
    if target == RoomStatus.OCCUPIED and occupied_count < capacity:
        raise InvalidTransition(
            "room", "*", target.value, f"only {occupied_count}/{capacity} slots are taken"
        )
    if target == RoomStatus.AVAILABLE and occupied_count >= capacity:
        raise InvalidTransition(
            "room", "*", target.value, f"room is full ({occupied_count}/{capacity})"
        )


def assert_capacity_change(occupied_count: int, new_capacity: int) -> None:
    if new_capacity < occupied_count:
        raise InvalidCapacityChange(new_capacity, occupied_count)


def assert_occupancy_in_bounds(occupied_count: int, capacity: int) -> None:
    if occupied_count < 0 or occupied_count > capacity:
        raise CapacityExceeded(
            f"Occupancy {occupied_count} is outside the room capacity 0..{capacity}"
        )


def derive_status(current: str, occupied_count: int, capacity: int) -> str:
    """Status a room settles into after its occupancy changed.

    ``maintenance`` is sticky; a full room becomes ``occupied``; an
    ``occupied`` room with a free slot returns to ``available``.
    """
    if current == RoomStatus.MAINTENANCE:
        return RoomStatus.MAINTENANCE.value
    if occupied_count >= capacity:
        return RoomStatus.OCCUPIED.value
    if current == RoomStatus.OCCUPIED:
        return RoomStatus.AVAILABLE.value
    return RoomStatus(current).value


def is_consistent(status: str, occupied_count: int, capacity: int) -> bool:
    """Whether a room's stored facts satisfy every room invariant."""
    if occupied_count < 0 or occupied_count > capacity:
        return False
    if status == RoomStatus.MAINTENANCE:
        return True
    return (status == RoomStatus.OCCUPIED) == (occupied_count == capacity)
