"""
Booking creation with race-safe slot allocation.

CONCURRENCY STRATEGY: Pre-check + Unique Slot Reservations
==========================================================

Problem:
  Two customers request the same court/hour at the same time.
  Both read "no conflicting booking", both insert, both succeed.
  Result: Double-booked court.

Solution:
  Every active booking owns one slot_reservations row per occupied hour,
  with a UNIQUE (court_id, date, hour) constraint.

  1. Read the active intervals for (court, date) and reject overlaps early
     with a friendly 409 (the common case)
  2. In ONE transaction: insert the booking, its reservation rows and its
     pending payment
  3. If the reservation insert violates the unique constraint, a concurrent
     request won the race -> roll back everything -> same 409

  This approach:
  - No explicit row locks; non-conflicting bookings never wait on each other
  - Overlapping multi-hour bookings collide on their shared hour, not only on
    identical start times
  - The database constraint is the safety mechanism; step 1 only produces a
    better error message sooner
  - Booking, reservations and payment commit together, so a failed payment
    insert can never leave an orphaned booking behind
"""

import hmac
import time
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from courtbook.core.config import get_settings
from courtbook.core.exceptions import (
    InternalError, NotFound, PastSlot, SlotTaken, ValidationError,
)
from courtbook.core.logging import get_logger
from courtbook.core.metrics import booking_latency, record_booking_attempt, record_slot_conflict
from courtbook.core.reference_codec import BookingReference
from courtbook.db.session import unit_of_work
from courtbook.models.booking import Booking, BookingStatus, generate_booking_number
from courtbook.models.payment import Payment, PaymentStatus
from courtbook.models.slot_reservation import SlotReservation
from courtbook.schemas.booking import BookingCreate
from courtbook.services.availability_service import get_active_intervals
from courtbook.services.court_service import get_active_court
from courtbook.services.scheduling import (
    calculate_amount, calculate_duration, has_conflict, is_past_slot, occupied_hours,
    operating_today,
)

logger = get_logger(__name__)

BOOKING_NUMBER_ATTEMPTS = 3


class _BookingNumberTaken(Exception):
    def __init__(self, booking_number: str):
        super().__init__(booking_number)
        self.booking_number = booking_number


def validate_booking_date(day: date, now: Optional[datetime] = None) -> None:
    """Bookings open today and close BOOKING_WINDOW_DAYS ahead (operating timezone)."""
    today = operating_today(now)
    if day < today:
        raise ValidationError("Booking date must be today or in the future", field="date")
    window_days = get_settings().BOOKING_WINDOW_DAYS
    if day > today + timedelta(days=window_days):
        raise ValidationError(
            f"Bookings can only be made up to {window_days} days in advance", field="date"
        )


async def create_booking(
    db: AsyncSession,
    data: BookingCreate,
    now: Optional[datetime] = None,
) -> Booking:
    """
    Create a PENDING_VERIFICATION booking and its PENDING payment.

    ``data`` has passed schema validation. The rate limit gate runs before
    this function (see api.deps.enforce_booking_rate_limit). Checks run in
    order and the first failure is raised.
    """
    started = time.perf_counter()
    try:
        booking = await _create_booking(db, data, now)
    except (ValidationError, NotFound):
        record_booking_attempt("invalid")
        raise
    except SlotTaken:
        record_booking_attempt("conflict")
        raise
    except InternalError:
        record_booking_attempt("error")
        raise
    except SQLAlchemyError as e:
        record_booking_attempt("error")
        logger.error(
            "booking_storage_error",
            error_code="BOOKING_READ_FAILED",
            court_id=data.court_id,
            error=str(e),
        )
        raise InternalError("BOOKING_READ_FAILED") from e
    record_booking_attempt("success")
    booking_latency.observe(time.perf_counter() - started)
    return booking


async def _create_booking(
    db: AsyncSession,
    data: BookingCreate,
    now: Optional[datetime],
) -> Booking:
    # Step 2 (storage and clock dependent part of validation)
    court = await get_active_court(db, data.court_id)
    if court is None:
        raise ValidationError("Selected court does not exist", field="court_id")
    validate_booking_date(data.date, now)

    # Step 3: server-side price and duration; anything the client sent is ignored
    total_amount = calculate_amount(data.start_time, data.end_time)
    duration = calculate_duration(data.start_time, data.end_time)

    # Step 4
    if is_past_slot(data.date, data.start_time, now):
        raise PastSlot()

    # Step 5: friendly pre-check
    intervals = await get_active_intervals(db, data.court_id, data.date)
    if has_conflict(data.start_time, data.end_time, intervals):
        record_slot_conflict("precheck")
        logger.info(
            "booking_slot_taken",
            stage="precheck",
            court_id=data.court_id,
            date=data.date.isoformat(),
            start_time=data.start_time.isoformat(),
            end_time=data.end_time.isoformat(),
        )
        raise SlotTaken()

    # Step 6 + 7: one transaction, unique reservations as the race backstop.
    # A booking number collision rolls back and retries with a fresh number.
    for attempt in range(1, BOOKING_NUMBER_ATTEMPTS + 1):
        try:
            booking = await _insert_booking(db, data, duration, total_amount)
            break
        except _BookingNumberTaken as e:
            logger.warning(
                "booking_number_collision",
                booking_number=e.booking_number,
                attempt=attempt,
            )
    else:
        logger.error(
            "booking_storage_error",
            error_code="BOOKING_NUMBER_EXHAUSTED",
            court_id=data.court_id,
            attempts=BOOKING_NUMBER_ATTEMPTS,
        )
        raise InternalError("BOOKING_NUMBER_EXHAUSTED")

    logger.info(
        "booking_created",
        booking_id=booking.id,
        booking_number=booking.booking_number,
        court_id=booking.court_id,
        date=booking.date.isoformat(),
        start_time=booking.start_time.isoformat(),
        end_time=booking.end_time.isoformat(),
        total_amount=total_amount,
    )
    return await get_booking_snapshot(db, booking.id)


async def _insert_booking(
    db: AsyncSession,
    data: BookingCreate,
    duration: int,
    total_amount: int,
) -> Booking:
    try:
        async with unit_of_work(db):
            booking = Booking(
                booking_number=generate_booking_number(),
                customer_name=data.customer_name,
                customer_email=data.customer_email,
                customer_phone=data.customer_phone,
                court_id=data.court_id,
                date=data.date,
                start_time=data.start_time,
                end_time=data.end_time,
                duration=duration,
                total_amount=total_amount,
                notes=data.notes,
                status=BookingStatus.PENDING_VERIFICATION.value,
            )
            db.add(booking)
            try:
                await db.flush()
            except IntegrityError as e:
                if "booking_number" in str(e.orig):
                    raise _BookingNumberTaken(booking.booking_number) from e
                raise

            await _reserve_slots(db, booking)

            db.add(
                Payment(
                    booking_id=booking.id,
                    payment_method=data.payment_method.value,
                    reference_code=data.reference_code,
                    amount=total_amount,
                    status=PaymentStatus.PENDING.value,
                )
            )
            await db.flush()
    except (SlotTaken, _BookingNumberTaken):
        raise
    except SQLAlchemyError as e:
        logger.error(
            "booking_storage_error",
            error_code="BOOKING_INSERT_FAILED",
            court_id=data.court_id,
            error=str(e),
        )
        raise InternalError("BOOKING_INSERT_FAILED") from e
    return booking


async def _reserve_slots(db: AsyncSession, booking: Booking) -> None:
    db.add_all(
        SlotReservation(
            booking_id=booking.id,
            court_id=booking.court_id,
            date=booking.date,
            hour=hour,
        )
        for hour in occupied_hours(booking.start_time, booking.end_time)
    )
    try:
        await db.flush()
    except IntegrityError as e:
        record_slot_conflict("constraint")
        logger.info(
            "booking_slot_taken",
            stage="constraint",
            court_id=booking.court_id,
            date=booking.date.isoformat(),
            start_time=booking.start_time.isoformat(),
            end_time=booking.end_time.isoformat(),
        )
        raise SlotTaken() from e


async def get_booking_snapshot(db: AsyncSession, booking_id: int) -> Booking:
    """Reload a booking with its court and payment from the database."""
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found")
    return booking


async def find_booking_by_reference(db: AsyncSession, reference: BookingReference) -> Booking:
    """
    Resolve a decoded (or legacy plain) reference to its booking.

    Unknown numbers and wrong tokens are indistinguishable to the caller.
    """
    result = await db.execute(
        select(Booking).where(Booking.booking_number == reference.booking_number)
    )
    booking = result.scalar_one_or_none()
    if booking is None or not hmac.compare_digest(
        booking.verification_token.encode("utf-8"), reference.token.encode("utf-8")
    ):
        raise NotFound("Booking not found or invalid verification token")
    return booking


async def get_recent_bookings(db: AsyncSession, limit: int = 10) -> list[Booking]:
    result = await db.execute(
        select(Booking)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def count_bookings_by_status(db: AsyncSession) -> dict[str, int]:
    result = await db.execute(
        select(Booking.status, func.count(Booking.id)).group_by(Booking.status)
    )
    counts = {status.value: 0 for status in BookingStatus}
    counts.update({status: count for status, count in result.all()})
    return counts
