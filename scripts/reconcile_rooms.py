#!/usr/bin/env python3
"""Re-derive room occupancy from active assignments."""

import asyncio
from uuid import uuid4

from app.core.permissions import Principal, UserRole
from app.database import get_db_context
from app.services.coordinator import coordinator
from app.services.room_service import room_service


async def reconcile_rooms(dry_run: bool = False) -> int:
    """Reconcile every room whose stored occupancy disagrees with its assignments."""
    operator = Principal(id=uuid4(), role=UserRole.ADMIN)

    async with get_db_context() as session:
        room_ids = await coordinator.find_inconsistent_rooms(session)
        if not room_ids:
            print("All rooms are consistent")
            return 0

        for room_id in room_ids:
            if dry_run:
                print(f"Inconsistent: {room_id}")
                continue
            room, previous_count, previous_status = await room_service.reconcile_room(
                session, operator, room_id
            )
            print(
                f"Room {room.number}: {previous_count}/{previous_status} -> "
                f"{room.occupied_count}/{room.status}"
            )

    return len(room_ids)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Reconcile room occupancy")
    parser.add_argument("--dry-run", action="store_true", help="Only list inconsistent rooms")

    args = parser.parse_args()

    asyncio.run(reconcile_rooms(dry_run=args.dry_run))
