"""Resident checkout policy.

A resident leaving within the grace window after approval is treated as a
cancellation (refundable, not counted as revenue); afterwards it is a regular
checkout that completes the stay.
"""

from datetime import UTC, datetime, timedelta

from app.domain.assignment_state import AssignmentStatus

DEFAULT_GRACE_HOURS = 24


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored in UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def is_within_grace_period(
    approved_at: datetime,
    now: datetime,
    grace_hours: int = DEFAULT_GRACE_HOURS,
) -> bool:
    elapsed = abs(_as_utc(now) - _as_utc(approved_at))
    return elapsed <= timedelta(hours=grace_hours)


def resolve_checkout_status(
    approved_at: datetime | None,
    created_at: datetime,
    now: datetime,
    grace_hours: int = DEFAULT_GRACE_HOURS,
) -> AssignmentStatus:
    """Target status for a resident-initiated checkout.

    Falls back to the creation time when the assignment carries no approval
    timestamp.
    """
    reference = approved_at or created_at
    if is_within_grace_period(reference, now, grace_hours):
        return AssignmentStatus.CANCELLED
    return AssignmentStatus.COMPLETED
