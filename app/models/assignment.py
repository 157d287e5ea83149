"""Room assignment (booking) database model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base, utcnow

if TYPE_CHECKING:
    from app.models.payment import Payment
    from app.models.room import Room

_OPEN_ASSIGNMENT = text("status IN ('pending', 'approved', 'active')")


class Assignment(Base):
    """A resident's claim on a room slot for a date range."""

    __tablename__ = "assignments"
    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_assignments_date_order"),
        CheckConstraint("duration_days > 0", name="ck_assignments_duration_positive"),
        # One open assignment per resident, enforced atomically with the insert
        Index(
            "uq_assignments_resident_open",
            "resident_id",
            unique=True,
            postgresql_where=_OPEN_ASSIGNMENT,
            sqlite_where=_OPEN_ASSIGNMENT,
        ),
        Index("ix_assignments_room_status", "room_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reference_number: Mapped[str] = mapped_column(
        String(30), unique=True, nullable=False, index=True
    )  # REF-DDMMYYYY-XXXXXX
    resident_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    room_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("rooms.id"), nullable=False, index=True
    )

    # Stay
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)

    # Pricing (rate snapshotted at submission)
    monthly_rate_snapshot: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)

    # Status: pending, approved, rejected, active, completed, cancelled
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)
    notes: Mapped[str | None] = mapped_column(Text)
    id_image: Mapped[str | None] = mapped_column(Text)  # opaque storage reference

    # Lifecycle timestamps
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    approved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    checked_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    checked_out_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    checked_out_by: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Relationships
    room: Mapped["Room"] = relationship("Room", back_populates="assignments", lazy="raise")
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="assignment", lazy="raise"
    )
