"""
Domain exceptions for the court booking API.

Services raise these; a single handler registered in main.py renders them as
``{"error": ..., "field": ...}`` with the status code carried by the class.
"""

from typing import Optional

from fastapi import status


class CourtBookingError(Exception):
    """Base exception for all domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.__class__.__name__

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.field:
            body["field"] = self.field
        return body

    def headers(self) -> Optional[dict[str, str]]:
        return None


class ValidationError(CourtBookingError):
    """Malformed or out-of-policy input; the user can fix it."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InvalidRange(ValidationError):
    default_message = "Invalid time range"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = "end_time") -> None:
        super().__init__(message, field)


class PastSlot(ValidationError):
    default_message = "Cannot book a time slot that has already passed"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = "start_time") -> None:
        super().__init__(message, field)


class ConflictError(CourtBookingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Request conflicts with the current state"


class SlotTaken(ConflictError):
    default_message = "This time slot is no longer available. Please choose another time."


class PaymentAlreadyProcessed(ConflictError):
    default_message = "Payment has already been processed"


class RateLimited(CourtBookingError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many booking attempts. Please try again later."

    def __init__(self, retry_after: int, message: Optional[str] = None) -> None:
        super().__init__(message)
        self.retry_after = max(int(retry_after), 1)

    def headers(self) -> Optional[dict[str, str]]:
        return {"Retry-After": str(self.retry_after)}


class Unauthorized(CourtBookingError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized - Please log in"

    def headers(self) -> Optional[dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(CourtBookingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden - Admin access required"


class NotFound(CourtBookingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalError(CourtBookingError):
    """Storage or infrastructure failure. Detail stays in the server log."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, error_code: str) -> None:
        super().__init__(None)
        self.error_code = error_code
