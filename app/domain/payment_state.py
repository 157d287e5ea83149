"""Payment verification state machine."""

from enum import Enum

from app.core.exceptions import InvalidTransition


class PaymentStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class PaymentMethod(str, Enum):
    GCASH = "gcash"
    CASH = "cash"


PAYMENT_TRANSITIONS = {
    "pending": {"verified", "rejected"},
    "verified": set(),
    "rejected": set(),
}

# Statuses that block a new submission for the same assignment.
LIVE_STATUSES = frozenset({"pending", "verified"})


def assert_payment_transition(current: str, target: str) -> None:
    allowed = PAYMENT_TRANSITIONS.get(current, set())
    if target not in allowed:
        reason = "verified payments are immutable" if current == PaymentStatus.VERIFIED else None
        raise InvalidTransition("payment", current, target, reason)


def requires_proof(method: str) -> bool:
    """GCash transfers must carry a reference number and a screenshot."""
    return method == PaymentMethod.GCASH
