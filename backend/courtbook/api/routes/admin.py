"""
Admin endpoints: payment verification and the booking dashboard.
All routes require an active admin.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from courtbook.db.session import get_db
from courtbook.models.admin_user import AdminUser
from courtbook.schemas.admin import BookingStats
from courtbook.schemas.booking import BookingResponse, PendingPaymentResponse
from courtbook.schemas.payment import PaymentVerifyRequest, PaymentVerifyResponse
from courtbook.services.auth_service import get_current_admin
from courtbook.services.booking_service import count_bookings_by_status, get_recent_bookings
from courtbook.services.payment_service import get_pending_payments, verify_payment

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/payments/verify", response_model=PaymentVerifyResponse)
async def verify_payment_endpoint(
    request: PaymentVerifyRequest,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Approve or reject a pending payment.

    Approval confirms the booking. Rejection cancels it, frees its slots and
    requires a rejectionReason. A payment can be decided only once.
    """
    payment, booking = await verify_payment(
        db, admin, request.payment_id, request.approved, request.rejection_reason
    )
    message = (
        "Payment verified and booking confirmed"
        if request.approved
        else "Payment rejected and booking cancelled"
    )
    return PaymentVerifyResponse(
        message=message,
        payment_id=payment.id,
        payment_status=payment.status,
        booking_status=booking.status,
    )


@router.get("/payments/pending", response_model=list[PendingPaymentResponse])
async def pending_payments(
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Payments awaiting a decision, newest first, with their bookings."""
    return await get_pending_payments(db)


@router.get("/bookings/recent", response_model=list[BookingResponse])
async def recent_bookings(
    limit: int = Query(10, ge=1, le=100),
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await get_recent_bookings(db, limit)


@router.get("/stats", response_model=BookingStats)
async def booking_stats(
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    counts = await count_bookings_by_status(db)
    return BookingStats(
        total_bookings=sum(counts.values()),
        pending_verification=counts["PENDING_VERIFICATION"],
        confirmed=counts["CONFIRMED"],
        cancelled=counts["CANCELLED"],
        completed=counts["COMPLETED"],
    )
