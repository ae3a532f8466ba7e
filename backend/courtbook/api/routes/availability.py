"""
Slot availability endpoint. Never cached: it must reflect bookings made
moments ago.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from courtbook.db.session import get_db
from courtbook.schemas.court import SlotAvailability
from courtbook.services.availability_service import get_available_slots

router = APIRouter(tags=["Availability"])


@router.get("/available-slots", response_model=list[SlotAvailability])
async def available_slots(
    day: date = Query(..., alias="date"),
    court_id: int = Query(..., alias="courtId", gt=0),
    db: AsyncSession = Depends(get_db),
):
    """Hourly slots for one court on one date, in ascending order."""
    return await get_available_slots(db, court_id, day)
