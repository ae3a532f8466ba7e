"""
Booking endpoints: race-safe creation and status lookup by reference.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from courtbook.api.deps import enforce_booking_rate_limit
from courtbook.core.exceptions import NotFound, ValidationError
from courtbook.core.metrics import record_reference_lookup
from courtbook.core.reference_codec import BookingReference, get_reference_codec
from courtbook.db.session import get_db
from courtbook.schemas.booking import BookingCreate, BookingCreatedResponse, BookingResponse
from courtbook.services.booking_service import create_booking, find_booking_by_reference

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post(
    "/",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_booking_rate_limit)],
)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Book a court for a contiguous block of hours.

    The booking starts as PENDING_VERIFICATION with a PENDING payment. If
    another request took any of the hours first, the response is a 409.
    The returned encrypted_reference is the customer's lookup credential.
    """
    booking = await create_booking(db, booking_data)
    reference = get_reference_codec().encode(booking.booking_number, booking.verification_token)
    response = BookingResponse.model_validate(booking).model_dump()
    return BookingCreatedResponse(**response, encrypted_reference=reference)


@router.get("/lookup", response_model=BookingResponse)
async def lookup_booking(
    ref: Optional[str] = Query(None, max_length=512),
    booking_number: Optional[str] = Query(None, max_length=32),
    token: Optional[str] = Query(None, max_length=128),
    db: AsyncSession = Depends(get_db),
):
    """
    Look up a booking without logging in.

    Pass the encrypted reference as ``ref``. The plain ``booking_number`` and
    ``token`` pair from older confirmation links is still accepted.
    """
    if ref:
        form = "encrypted"
        reference = get_reference_codec().decode(ref)
        if reference is None:
            record_reference_lookup(form, "invalid")
            raise ValidationError("Invalid booking reference", field="ref")
    elif booking_number and token:
        form = "legacy"
        reference = BookingReference(booking_number, token)
    else:
        raise ValidationError("Booking reference is required", field="ref")

    try:
        booking = await find_booking_by_reference(db, reference)
    except NotFound:
        record_reference_lookup(form, "not_found")
        raise
    record_reference_lookup(form, "found")
    return booking
