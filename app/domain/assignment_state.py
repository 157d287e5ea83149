"""Assignment (booking) state machine."""

from enum import Enum

from app.core.exceptions import InvalidTransition


class AssignmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ASSIGNMENT_TRANSITIONS = {
    "pending": {"approved", "rejected"},
    "approved": {"active", "cancelled", "completed"},
    "active": {"completed", "cancelled"},
    "rejected": set(),
    "completed": set(),
    "cancelled": set(),
}

# A resident may hold at most one assignment in any of these states.
OPEN_STATUSES = frozenset({"pending", "approved", "active"})
TERMINAL_STATUSES = frozenset(
    status for status, targets in ASSIGNMENT_TRANSITIONS.items() if not targets
)

# Only active assignments consume a room slot.
OCCUPYING_STATUSES = frozenset({"active"})


def assert_assignment_transition(current: str, target: str) -> None:
    allowed = ASSIGNMENT_TRANSITIONS.get(current, set())
    if target not in allowed:
        reason = "assignment is closed" if current in TERMINAL_STATUSES else None
        raise InvalidTransition("assignment", current, target, reason)


def is_open(status: str) -> bool:
    return status in OPEN_STATUSES
