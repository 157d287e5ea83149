"""Income and transaction reporting (read-only queries)."""

import calendar
import logging
from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidDateRange, ValidationError
from app.domain.assignment_state import AssignmentStatus
from app.models.assignment import Assignment
from app.models.room import Room

logger = logging.getLogger(__name__)

# Assignments whose price counts as earned income
INCOME_STATUSES = (
    AssignmentStatus.APPROVED.value,
    AssignmentStatus.ACTIVE.value,
    AssignmentStatus.COMPLETED.value,
)


def _day_bounds(period_start: date, period_end: date) -> tuple[datetime, datetime]:
    """Half-open UTC instant range covering both calendar days inclusively."""
    start = datetime.combine(period_start, time.min, tzinfo=UTC)
    end = datetime.combine(period_end + timedelta(days=1), time.min, tzinfo=UTC)
    return start, end


class ReportingService:
    """Read-only income reporting service."""

    async def get_income_summary(
        self,
        db: AsyncSession,
        period_start: date,
        period_end: date,
    ) -> dict:
        """Income and check-in/out activity for an inclusive date range.

        Income is the full stored price of every approved, active or
        completed assignment whose stay overlaps the range.
        """
        if period_end < period_start:
            raise InvalidDateRange("Period end must not be before period start")
        start_at, end_at = _day_bounds(period_start, period_end)

        # Income from overlapping stays
        income = await db.execute(
            select(
                func.coalesce(func.sum(Assignment.total_price), 0),
                func.count(),
            ).where(
                Assignment.status.in_(INCOME_STATUSES),
                Assignment.start_date <= period_end,
                Assignment.end_date >= period_start,
            )
        )
        total_income, assignment_count = income.one()

        # Check-ins
        check_ins = await db.scalar(
            select(func.count()).where(
                Assignment.status.in_(INCOME_STATUSES),
                Assignment.checked_in_at >= start_at,
                Assignment.checked_in_at < end_at,
            )
        )

        # Check-outs (a completion without a checkout counts at completion time)
        checked_out = func.coalesce(Assignment.checked_out_at, Assignment.completed_at)
        check_outs = await db.scalar(
            select(func.count()).where(
                Assignment.status == AssignmentStatus.COMPLETED.value,
                checked_out >= start_at,
                checked_out < end_at,
            )
        )

        # Cancellations
        cancellations = await db.scalar(
            select(func.count()).where(
                Assignment.status == AssignmentStatus.CANCELLED.value,
                Assignment.cancelled_at >= start_at,
                Assignment.cancelled_at < end_at,
            )
        )

        return {
            "period_start": period_start,
            "period_end": period_end,
            "total_income": int(total_income),
            "assignment_count": assignment_count,
            "check_ins": check_ins or 0,
            "check_outs": check_outs or 0,
            "cancellations": cancellations or 0,
        }

    async def get_monthly_income(self, db: AsyncSession, year: int, month: int) -> dict:
        _, last_day = calendar.monthrange(year, month)
        return await self.get_income_summary(db, date(year, month, 1), date(year, month, last_day))

    async def get_yearly_income(self, db: AsyncSession, year: int) -> dict:
        """Year totals plus a breakdown per calendar month."""
        summary = await self.get_income_summary(db, date(year, 1, 1), date(year, 12, 31))
        months = [await self.get_monthly_income(db, year, month) for month in range(1, 13)]
        return {**summary, "year": year, "months": months}

    async def list_transactions(
        self,
        db: AsyncSession,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> dict:
        """Check-in and check-out records, most recent checkout first.

        With a date range, returns stays that were under way at any point
        within it. Without one, returns every stay that has checked in.

        Raises:
            ValidationError: if only one bound of the range is given
            InvalidDateRange: if the range ends before it starts
        """
        if (start_date is None) != (end_date is None):
            raise ValidationError("Provide both start_date and end_date, or neither")

        query = (
            select(Assignment, Room.number, Room.room_type)
            .join(Room, Room.id == Assignment.room_id)
            .where(Assignment.checked_in_at.is_not(None))
            .execution_options(populate_existing=True)
        )
        if start_date is not None and end_date is not None:
            if end_date < start_date:
                raise InvalidDateRange()
            start_at, end_at = _day_bounds(start_date, end_date)
            query = query.where(
                Assignment.checked_in_at < end_at,
                or_(
                    Assignment.checked_out_at.is_(None),
                    Assignment.checked_out_at >= start_at,
                ),
            )

        result = await db.execute(
            query.order_by(
                Assignment.checked_out_at.desc().nulls_first(),
                Assignment.checked_in_at.desc(),
            )
        )

        transactions = []
        total_amount = 0
        for assignment, room_number, room_type in result.all():
            days_stayed = None
            if assignment.checked_out_at is not None:
                days_stayed = (assignment.checked_out_at - assignment.checked_in_at).days
            total_amount += assignment.total_price
            transactions.append(
                {
                    "assignment_id": assignment.id,
                    "reference_number": assignment.reference_number,
                    "resident_id": assignment.resident_id,
                    "room_number": room_number,
                    "room_type": room_type,
                    "monthly_rate": assignment.monthly_rate_snapshot,
                    "total_price": assignment.total_price,
                    "status": assignment.status,
                    "movement": "check_out" if assignment.checked_out_at else "check_in",
                    "approved_at": assignment.approved_at,
                    "checked_in_at": assignment.checked_in_at,
                    "checked_out_at": assignment.checked_out_at,
                    "days_stayed": days_stayed,
                    "checked_out_by": assignment.checked_out_by,
                }
            )

        logger.info(
            "Transaction report %s..%s: %d records", start_date, end_date, len(transactions)
        )
        return {
            "start_date": start_date,
            "end_date": end_date,
            "transactions": transactions,
            "count": len(transactions),
            "total_amount": total_amount,
        }


# Singleton instance
reporting_service = ReportingService()
