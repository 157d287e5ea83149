"""Payment database model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base, utcnow

if TYPE_CHECKING:
    from app.models.assignment import Assignment

_LIVE_PAYMENT = text("status IN ('pending', 'verified')")


class Payment(Base):
    """Payment evidence submitted against an approved assignment."""

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),
        # At most one pending/verified payment per assignment
        Index(
            "uq_payments_assignment_live",
            "assignment_id",
            unique=True,
            postgresql_where=_LIVE_PAYMENT,
            sqlite_where=_LIVE_PAYMENT,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    assignment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("assignments.id"), nullable=False, index=True
    )
    resident_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Amount (whole currency units, equals the assignment total)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)

    # Method: gcash, cash
    method: Mapped[str] = mapped_column(String(10), nullable=False)
    reference_number: Mapped[str | None] = mapped_column(String(100))  # GCash reference
    proof_image: Mapped[str | None] = mapped_column(Text)  # opaque storage reference

    # Status: pending, verified, rejected
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)
    remarks: Mapped[str] = mapped_column(Text, default="")
    verified_by: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Relationships
    assignment: Mapped["Assignment"] = relationship(
        "Assignment", back_populates="payments", lazy="raise"
    )
