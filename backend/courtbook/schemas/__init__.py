from courtbook.schemas.admin import AdminLogin, AdminResponse, BookingStats, Token
from courtbook.schemas.booking import (
    BookingCreate, BookingResponse, BookingCreatedResponse, BookingSummary, PendingPaymentResponse,
)
from courtbook.schemas.court import CourtResponse, SlotAvailability
from courtbook.schemas.payment import PaymentResponse, PaymentVerifyRequest, PaymentVerifyResponse

__all__ = [
    "AdminLogin", "AdminResponse", "BookingStats", "Token",
    "BookingCreate", "BookingResponse", "BookingCreatedResponse", "BookingSummary",
    "PendingPaymentResponse",
    "CourtResponse", "SlotAvailability",
    "PaymentResponse", "PaymentVerifyRequest", "PaymentVerifyResponse",
]
