"""
Resident checkout policy tests
"""
from datetime import UTC, datetime, timedelta

from app.domain.assignment_state import AssignmentStatus
from app.domain.checkout_policy import is_within_grace_period, resolve_checkout_status

NOW = datetime(2024, 6, 10, 12, 0, tzinfo=UTC)


class TestGracePeriod:

    def test_within_window(self):
        assert is_within_grace_period(NOW - timedelta(hours=23), NOW)

    def test_boundary_inclusive(self):
        assert is_within_grace_period(NOW - timedelta(hours=24), NOW)

    def test_outside_window(self):
        assert not is_within_grace_period(NOW - timedelta(hours=25), NOW)

    def test_naive_timestamps_treated_as_utc(self):
        approved = (NOW - timedelta(hours=2)).replace(tzinfo=None)
        assert is_within_grace_period(approved, NOW)

    def test_custom_window(self):
        assert not is_within_grace_period(NOW - timedelta(hours=3), NOW, grace_hours=2)


class TestResolveCheckoutStatus:

    def test_early_checkout_cancels(self):
        status = resolve_checkout_status(NOW - timedelta(hours=1), NOW - timedelta(days=3), NOW)
        assert status == AssignmentStatus.CANCELLED

    def test_late_checkout_completes(self):
        status = resolve_checkout_status(NOW - timedelta(days=2), NOW - timedelta(days=5), NOW)
        assert status == AssignmentStatus.COMPLETED

    def test_falls_back_to_creation_time(self):
        status = resolve_checkout_status(None, NOW - timedelta(days=2), NOW)
        assert status == AssignmentStatus.COMPLETED
