"""Reporting Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel


class IncomeSummary(BaseModel):
    """Income and occupancy movement for a period."""

    period_start: date
    period_end: date
    total_income: int
    assignment_count: int
    check_ins: int
    check_outs: int
    cancellations: int


class YearlyIncomeReport(IncomeSummary):
    """Year totals with a per-month breakdown."""

    year: int
    months: list[IncomeSummary]


class TransactionRecord(BaseModel):
    """One stay in the check-in/check-out ledger."""

    assignment_id: UUID
    reference_number: str
    resident_id: UUID
    room_number: str
    room_type: str
    monthly_rate: Decimal
    total_price: int
    status: str
    movement: str  # check_in, check_out
    approved_at: datetime | None
    checked_in_at: datetime
    checked_out_at: datetime | None
    days_stayed: int | None  # None while the stay is ongoing
    checked_out_by: UUID | None


class TransactionReport(BaseModel):
    """Printable transaction list."""

    start_date: date | None
    end_date: date | None
    transactions: list[TransactionRecord]
    count: int
    total_amount: int
