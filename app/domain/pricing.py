"""Stay duration and price calculation.

A stay is charged per day at the room's monthly rate spread over a fixed
month length (30 days by default), rounded half-up to whole currency units:

    total_price = round(monthly_rate / days_per_month * duration_days)

The rate is snapshotted on the assignment at submission time, so the price
can always be recomputed from the stored snapshot and duration.
"""

import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from app.core.exceptions import InvalidDateRange

DEFAULT_DAYS_PER_MONTH = 30


def validate_stay_dates(start_date: date, end_date: date, today: date | None = None) -> None:
    """Raise InvalidDateRange for an empty/negative stay or a start in the past."""
    if end_date <= start_date:
        raise InvalidDateRange("End date must be after start date")
    if today is not None and start_date < today:
        raise InvalidDateRange("Start date cannot be in the past")


def calculate_duration(start_date: date, end_date: date) -> int:
    """Number of days in the stay, rounded up."""
    seconds = (end_date - start_date).total_seconds()
    return math.ceil(seconds / 86400)


def calculate_total_price(
    monthly_rate: Decimal | int | str,
    duration_days: int,
    days_per_month: int = DEFAULT_DAYS_PER_MONTH,
) -> int:
    """Price of a stay in whole currency units."""
    daily_rate = Decimal(str(monthly_rate)) / Decimal(days_per_month)
    total = (daily_rate * Decimal(duration_days)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(total)


def quote_stay(
    monthly_rate: Decimal | int | str,
    start_date: date,
    end_date: date,
    days_per_month: int = DEFAULT_DAYS_PER_MONTH,
) -> tuple[int, int]:
    """Return ``(duration_days, total_price)`` for a validated date range."""
    validate_stay_dates(start_date, end_date)
    duration = calculate_duration(start_date, end_date)
    return duration, calculate_total_price(monthly_rate, duration, days_per_month)
