from courtbook.models.court import Court
from courtbook.models.booking import Booking, BookingStatus, ACTIVE_BOOKING_STATUSES
from courtbook.models.payment import Payment, PaymentMethod, PaymentStatus
from courtbook.models.slot_reservation import SlotReservation
from courtbook.models.admin_user import AdminUser

__all__ = [
    "Court",
    "Booking", "BookingStatus", "ACTIVE_BOOKING_STATUSES",
    "Payment", "PaymentMethod", "PaymentStatus",
    "SlotReservation",
    "AdminUser",
]
