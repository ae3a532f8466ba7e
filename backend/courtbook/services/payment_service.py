"""
Admin payment verification.

State machine:
  Payment  PENDING -> VERIFIED | REJECTED   (exactly once)
  Booking  PENDING_VERIFICATION -> CONFIRMED | CANCELLED

Both transitions are conditional UPDATEs executed in one transaction, so a
payment and its booking never disagree and two admins deciding the same
payment at once cannot both win: the second UPDATE matches zero rows.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from courtbook.core.exceptions import (
    ConflictError, InternalError, NotFound, PaymentAlreadyProcessed, ValidationError,
)
from courtbook.core.logging import get_logger
from courtbook.core.metrics import record_payment_verification
from courtbook.db.session import unit_of_work
from courtbook.models.admin_user import AdminUser
from courtbook.models.booking import Booking, BookingStatus
from courtbook.models.payment import Payment, PaymentStatus
from courtbook.models.slot_reservation import SlotReservation

logger = get_logger(__name__)


async def verify_payment(
    db: AsyncSession,
    admin: AdminUser,
    payment_id: int,
    approved: bool,
    rejection_reason: Optional[str] = None,
) -> tuple[Payment, Booking]:
    """
    Approve or reject a pending payment and cascade the outcome to its booking.

    Rejection frees the booking's slots. Returns the updated payment and booking.
    """
    reason = (rejection_reason or "").strip() or None
    if not approved and reason is None:
        raise ValidationError(
            "Rejection reason is required when rejecting a payment", field="rejectionReason"
        )

    if approved:
        payment_values = {
            "status": PaymentStatus.VERIFIED.value,
            "verified_at": datetime.now(timezone.utc),
            "verified_by": admin.user_id,
        }
        booking_status = BookingStatus.CONFIRMED.value
    else:
        payment_values = {
            "status": PaymentStatus.REJECTED.value,
            "verified_at": datetime.now(timezone.utc),
            "verified_by": admin.user_id,
            "rejection_reason": reason,
        }
        booking_status = BookingStatus.CANCELLED.value

    try:
        async with unit_of_work(db):
            result = await db.execute(
                update(Payment)
                .where(Payment.id == payment_id, Payment.status == PaymentStatus.PENDING.value)
                .values(**payment_values)
                .returning(Payment.booking_id)
            )
            booking_id = result.scalar_one_or_none()
            if booking_id is None:
                await _raise_for_undecidable_payment(db, payment_id)

            result = await db.execute(
                update(Booking)
                .where(
                    Booking.id == booking_id,
                    Booking.status == BookingStatus.PENDING_VERIFICATION.value,
                )
                .values(status=booking_status)
            )
            if result.rowcount != 1:
                logger.warning(
                    "payment_booking_state_mismatch",
                    payment_id=payment_id,
                    booking_id=booking_id,
                )
                raise ConflictError("Booking is no longer awaiting payment verification")

            if not approved:
                await db.execute(
                    delete(SlotReservation).where(SlotReservation.booking_id == booking_id)
                )
    except (NotFound, ConflictError):
        raise
    except SQLAlchemyError as e:
        logger.error(
            "payment_verification_storage_error",
            error_code="PAYMENT_VERIFY_FAILED",
            payment_id=payment_id,
            error=str(e),
        )
        raise InternalError("PAYMENT_VERIFY_FAILED") from e

    outcome = "verified" if approved else "rejected"
    record_payment_verification(outcome)
    logger.info(
        f"payment_{outcome}",
        payment_id=payment_id,
        booking_id=booking_id,
        admin_user_id=admin.user_id,
        booking_status=booking_status,
    )

    payment = await _load_payment(db, payment_id)
    return payment, payment.booking


async def _raise_for_undecidable_payment(db: AsyncSession, payment_id: int) -> None:
    result = await db.execute(select(Payment.status).where(Payment.id == payment_id))
    current = result.scalar_one_or_none()
    if current is None:
        record_payment_verification("not_found")
        raise NotFound("Payment not found")
    record_payment_verification("already_processed")
    raise PaymentAlreadyProcessed(f"Payment has already been {current.lower()}")


async def _load_payment(db: AsyncSession, payment_id: int) -> Payment:
    result = await db.execute(
        select(Payment)
        .where(Payment.id == payment_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def get_pending_payments(db: AsyncSession) -> list[Payment]:
    result = await db.execute(
        select(Payment)
        .where(Payment.status == PaymentStatus.PENDING.value)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
    )
    return list(result.scalars().all())
