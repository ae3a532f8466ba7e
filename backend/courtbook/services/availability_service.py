"""
Slot availability for one court on one date.

Reads are not linearized against concurrent bookings: a slot reported as
available can be taken a moment later. The booking writer re-checks and the
database constraint rejects the loser, so nothing here needs locking.
"""

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from courtbook.core.exceptions import NotFound
from courtbook.models.booking import Booking, ACTIVE_BOOKING_STATUSES
from courtbook.schemas.court import SlotAvailability
from courtbook.services.court_service import get_active_court
from courtbook.services.scheduling import (
    generate_slots, has_conflict, is_past_slot, slot_end,
)


async def get_active_intervals(
    db: AsyncSession, court_id: int, day: date
) -> list[tuple[time, time]]:
    """[start, end) of every CONFIRMED or PENDING_VERIFICATION booking."""
    result = await db.execute(
        select(Booking.start_time, Booking.end_time).where(
            Booking.court_id == court_id,
            Booking.date == day,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
    )
    return [(row.start_time, row.end_time) for row in result.all()]


async def get_available_slots(
    db: AsyncSession,
    court_id: int,
    day: date,
    now: Optional[datetime] = None,
) -> list[SlotAvailability]:
    court = await get_active_court(db, court_id)
    if court is None:
        raise NotFound("Court not found")

    intervals = await get_active_intervals(db, court_id, day)

    return [
        SlotAvailability(
            time=slot.strftime("%H:%M"),
            available=not has_conflict(slot, slot_end(slot), intervals),
        )
        for slot in generate_slots()
        if not is_past_slot(day, slot, now)
    ]
