"""Room inventory endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_permission
from app.core.permissions import Permission, Principal
from app.domain.room_state import RoomStatus
from app.models.room import Room
from app.schemas.room import (
    RoomCreate,
    RoomListResponse,
    RoomPublicListResponse,
    RoomPublicResponse,
    RoomReconcileResponse,
    RoomResponse,
    RoomStatusUpdate,
    RoomUpdate,
)
from app.services.room_service import room_service

router = APIRouter()

RoomViewer = Annotated[Principal, Depends(require_permission(Permission.VIEW_ROOMS))]
RoomManager = Annotated[Principal, Depends(require_permission(Permission.MANAGE_ROOMS))]


@router.get("/", response_model=RoomListResponse)
async def list_rooms(
    principal: RoomViewer,
    db: Annotated[AsyncSession, Depends(get_db)],
    room_status: Annotated[RoomStatus | None, Query(alias="status")] = None,
) -> RoomListResponse:
    """List rooms, optionally filtered by status."""
    rooms, total = await room_service.list_rooms(db, room_status)
    return RoomListResponse(rooms=[RoomResponse.model_validate(r) for r in rooms], total=total)


@router.get("/available", response_model=RoomListResponse)
async def list_available_rooms(
    principal: RoomViewer,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoomListResponse:
    """List rooms with a free slot that are not under maintenance."""
    rooms, total = await room_service.list_available_rooms(db)
    return RoomListResponse(rooms=[RoomResponse.model_validate(r) for r in rooms], total=total)


@router.get("/public", response_model=RoomPublicListResponse)
async def list_public_rooms(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoomPublicListResponse:
    """Browse the room catalogue without signing in."""
    rooms, total = await room_service.list_rooms(db)
    return RoomPublicListResponse(
        rooms=[RoomPublicResponse.model_validate(r) for r in rooms], total=total
    )


@router.get("/public/available", response_model=RoomPublicListResponse)
async def list_public_available_rooms(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoomPublicListResponse:
    """Rooms open for booking, without signing in."""
    rooms, total = await room_service.list_available_rooms(db)
    return RoomPublicListResponse(
        rooms=[RoomPublicResponse.model_validate(r) for r in rooms], total=total
    )


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: UUID,
    principal: RoomViewer,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Room:
    """Get room details."""
    return await room_service.get_room(db, room_id)


@router.post("/", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    data: RoomCreate,
    admin: RoomManager,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Room:
    """Add a room to the inventory."""
    return await room_service.create_room(db, admin, data)


@router.patch("/{room_id}", response_model=RoomResponse)
async def update_room(
    room_id: UUID,
    data: RoomUpdate,
    admin: RoomManager,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Room:
    """Edit a room. Capacity cannot drop below the current occupancy."""
    return await room_service.update_room(db, admin, room_id, data)


@router.put("/{room_id}/status", response_model=RoomResponse)
async def set_room_status(
    room_id: UUID,
    data: RoomStatusUpdate,
    admin: RoomManager,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Room:
    """Change a room's status."""
    return await room_service.set_status(db, admin, room_id, data.status)


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: UUID,
    admin: RoomManager,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> None:
    """Delete a room that has no open assignments."""
    await room_service.delete_room(db, admin, room_id)


@router.post("/{room_id}/reconcile", response_model=RoomReconcileResponse)
async def reconcile_room(
    room_id: UUID,
    admin: RoomManager,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoomReconcileResponse:
    """Re-derive a room's occupancy from its active assignments."""
    room, previous_count, previous_status = await room_service.reconcile_room(db, admin, room_id)
    return RoomReconcileResponse(
        room=RoomResponse.model_validate(room),
        previous_occupied_count=previous_count,
        previous_status=previous_status,
        changed=(previous_count, previous_status) != (room.occupied_count, room.status),
    )
