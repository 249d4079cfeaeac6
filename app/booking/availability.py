"""Availability checks for table bookings"""

import asyncio
from collections import defaultdict
from datetime import date, time
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.booking.state_machine import ACTIVE_STATUSES
from app.models.reservation import Reservation

logger = structlog.get_logger()

# One lock per table type; held across the conflict check and the write that follows
_slot_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)


def slot_lock(table_type: str) -> asyncio.Lock:
    return _slot_locks[table_type]


def intervals_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open interval test; touching endpoints do not overlap"""
    return start_a < end_b and end_a > start_b


async def has_conflict(
    db: AsyncSession,
    table_type: str,
    reservation_date: date,
    start_time: time,
    end_time: time,
    exclude_id: Optional[UUID] = None,
) -> bool:
    """Check whether a slot overlaps any active reservation of the same table type and day"""
    query = select(Reservation).where(
        Reservation.table_type == table_type,
        Reservation.reservation_date == reservation_date,
        Reservation.status.in_([status.value for status in ACTIVE_STATUSES]),
    )
    if exclude_id is not None:
        query = query.where(Reservation.id != exclude_id)

    result = await db.execute(query)
    for existing in result.scalars():
        if intervals_overlap(start_time, end_time, existing.start_time, existing.end_time):
            logger.info(
                "Slot conflict",
                table_type=table_type,
                reservation_date=reservation_date.isoformat(),
                conflicting_id=str(existing.id),
            )
            return True
    return False
