"""Room inventory database model."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import JSON, CheckConstraint, DateTime, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.database import Base, utcnow

if TYPE_CHECKING:
    from app.models.assignment import Assignment


class Room(Base):
    """Dormitory room."""

    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("capacity >= 1 AND capacity <= 6", name="ck_rooms_capacity_range"),
        CheckConstraint(
            "occupied_count >= 0 AND occupied_count <= capacity",
            name="ck_rooms_occupancy_within_capacity",
        ),
        CheckConstraint("floor >= 0", name="ck_rooms_floor_non_negative"),
        CheckConstraint("monthly_rate >= 0", name="ck_rooms_rate_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    floor: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    room_type: Mapped[str] = mapped_column(String(20), nullable=False)  # Standard, Single, Double, Suite
    monthly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("5000"))

    # Status: available, occupied, maintenance
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="available", index=True)
    # Written only by the consistency coordinator
    occupied_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    description: Mapped[str] = mapped_column(Text, default="")
    amenities: Mapped[list[str]] = mapped_column(JSON, default=list)
    images: Mapped[list[str]] = mapped_column(JSON, default=list)  # opaque storage references

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Relationships
    assignments: Mapped[list["Assignment"]] = relationship(
        "Assignment", back_populates="room", lazy="raise"
    )

    @property
    def available_slots(self) -> int:
        return self.capacity - self.occupied_count
