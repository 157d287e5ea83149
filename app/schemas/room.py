"""Room-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.config import settings
from app.domain.room_state import MAX_CAPACITY, MIN_CAPACITY, RoomStatus, RoomType
from app.utils.validators import (
    dedupe_preserving_order,
    normalize_room_number,
    parse_amenities,
    validate_room_number,
)


def _check_room_number(v: str) -> str:
    v = normalize_room_number(v)
    if not validate_room_number(v):
        raise ValueError(
            f"{v} is not a valid room number! Use only uppercase letters, numbers, and hyphens."
        )
    return v


def _check_images(v: list[str]) -> list[str]:
    v = dedupe_preserving_order(v)
    if len(v) > settings.max_room_images:
        raise ValueError(f"A room can have at most {settings.max_room_images} images")
    return v


class RoomCreate(BaseModel):
    """Schema for creating a room."""

    number: str = Field(..., min_length=1, max_length=20)
    floor: int = Field(..., ge=0)
    capacity: int = Field(..., ge=MIN_CAPACITY, le=MAX_CAPACITY)
    room_type: RoomType
    monthly_rate: Decimal = Field(default=Decimal("5000"), ge=0, max_digits=10, decimal_places=2)
    status: RoomStatus = RoomStatus.AVAILABLE
    description: str = Field(default="", max_length=2000)
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)

    @field_validator("number")
    @classmethod
    def validate_number(cls, v: str) -> str:
        return _check_room_number(v)

    @field_validator("amenities", mode="before")
    @classmethod
    def validate_amenities(cls, v):
        return parse_amenities(v)

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: list[str]) -> list[str]:
        return _check_images(v)

    @field_validator("status")
    @classmethod
    def validate_initial_status(cls, v: RoomStatus) -> RoomStatus:
        # A new room has no occupants, so it cannot start out full.
        if v == RoomStatus.OCCUPIED:
            raise ValueError("A new room cannot be created as occupied")
        return v


class RoomUpdate(BaseModel):
    """Schema for editing a room; omitted fields are left unchanged.

    ``occupied_count`` is deliberately absent: only assignment activation and
    termination move it.
    """

    number: str | None = Field(None, min_length=1, max_length=20)
    floor: int | None = Field(None, ge=0)
    capacity: int | None = Field(None, ge=MIN_CAPACITY, le=MAX_CAPACITY)
    room_type: RoomType | None = None
    monthly_rate: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    status: RoomStatus | None = None
    description: str | None = Field(None, max_length=2000)
    amenities: list[str] | None = None
    images: list[str] | None = None

    @field_validator("number")
    @classmethod
    def validate_number(cls, v: str | None) -> str | None:
        return None if v is None else _check_room_number(v)

    @field_validator("amenities", mode="before")
    @classmethod
    def validate_amenities(cls, v):
        return None if v is None else parse_amenities(v)

    @field_validator("images")
    @classmethod
    def validate_images(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _check_images(v)


class RoomStatusUpdate(BaseModel):
    """Schema for a bare status change."""

    status: RoomStatus


class RoomResponse(BaseModel):
    """Schema for room response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    number: str
    floor: int
    capacity: int
    room_type: str
    monthly_rate: Decimal
    status: str
    occupied_count: int
    available_slots: int
    description: str
    amenities: list[str]
    images: list[str]
    created_at: datetime
    updated_at: datetime


class RoomListResponse(BaseModel):
    """Schema for room list."""

    rooms: list[RoomResponse]
    total: int


class RoomReconcileResponse(BaseModel):
    """Outcome of re-deriving a room's occupancy from its active assignments."""

    room: RoomResponse
    previous_occupied_count: int
    previous_status: str
    changed: bool


class RoomPublicResponse(BaseModel):
    """Room fields shown to anonymous visitors."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    number: str
    floor: int
    room_type: str
    monthly_rate: Decimal
    capacity: int
    occupied_count: int
    available_slots: int
    status: str
    description: str
    amenities: list[str]
    images: list[str]


class RoomPublicListResponse(BaseModel):
    """Schema for the public room list."""

    rooms: list[RoomPublicResponse]
    total: int
