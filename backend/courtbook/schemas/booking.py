"""
Pydantic schemas for booking-related request/response validation.
"""

import re
from datetime import date, datetime, time
from typing import Any, Optional

from pydantic import (
    BaseModel, EmailStr, Field, ValidationInfo, field_serializer, field_validator,
)

from courtbook.core.config import get_settings
from courtbook.models.payment import PaymentMethod
from courtbook.schemas.payment import PaymentResponse
from courtbook.services.scheduling import parse_hour

NAME_PATTERN = r"^[a-zA-Z\s\-\.]+$"
PHONE_PATTERN = r"^(09\d{9}|\+639\d{9})$"
REFERENCE_CODE_PATTERN = r"^[a-zA-Z0-9\-]+$"
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([0-1][0-9]|2[0-2]):00$")


def _format_time(value: time) -> str:
    return value.strftime("%H:%M")


class BookingCreate(BaseModel):
    """Customer booking request.

    Amount and duration are not part of the request; any such keys sent by
    the client are ignored and recomputed on the server.
    """

    customer_name: str = Field(..., min_length=2, max_length=100, pattern=NAME_PATTERN)
    customer_email: EmailStr
    customer_phone: str = Field(..., pattern=PHONE_PATTERN)
    court_id: int = Field(..., gt=0)
    date: date
    start_time: time
    end_time: time
    payment_method: PaymentMethod
    reference_code: str = Field(..., min_length=1, max_length=100, pattern=REFERENCE_CODE_PATTERN)
    notes: Optional[str] = Field(None, max_length=500)

    model_config = {"extra": "ignore", "str_strip_whitespace": True}

    @field_validator("customer_email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        if len(value) > 255:
            raise ValueError("Email must be less than 255 characters")
        return value.lower()

    @field_validator("date", mode="before")
    @classmethod
    def iso_date_only(cls, value: Any) -> Any:
        if isinstance(value, str) and not DATE_PATTERN.match(value):
            raise ValueError("Invalid date format (YYYY-MM-DD)")
        if not isinstance(value, (str, date)):
            raise ValueError("Invalid date format (YYYY-MM-DD)")
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def on_the_hour(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, time):
            return value
        if not isinstance(value, str) or not TIME_PATTERN.match(value):
            raise ValueError(f"Invalid {info.field_name.replace('_', ' ')} format (HH:00)")
        return parse_hour(value)

    @field_validator("start_time")
    @classmethod
    def start_within_hours(cls, value: time) -> time:
        settings = get_settings()
        if not settings.OPENING_HOUR <= value.hour < settings.CLOSING_HOUR:
            raise ValueError(
                f"Start time must be between {settings.OPENING_HOUR:02d}:00 "
                f"and {settings.CLOSING_HOUR - 1:02d}:00"
            )
        if value.minute:
            raise ValueError("Start time must be on the hour")
        return value

    @field_validator("end_time")
    @classmethod
    def end_within_hours(cls, value: time, info: ValidationInfo) -> time:
        settings = get_settings()
        if not settings.OPENING_HOUR < value.hour <= settings.CLOSING_HOUR:
            raise ValueError(
                f"End time must be between {settings.OPENING_HOUR + 1:02d}:00 "
                f"and {settings.CLOSING_HOUR:02d}:00"
            )
        if value.minute:
            raise ValueError("End time must be on the hour")

        start = info.data.get("start_time")
        if start is not None:
            if value.hour <= start.hour:
                raise ValueError("End time must be after start time")
            if value.hour - start.hour > settings.MAX_BOOKING_HOURS:
                raise ValueError(f"Maximum booking duration is {settings.MAX_BOOKING_HOURS} hours")
        return value

    @field_validator("notes")
    @classmethod
    def blank_notes_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class BookingResponse(BaseModel):
    id: int
    booking_number: str
    customer_name: str
    customer_email: str
    customer_phone: str
    court_id: int
    court_name: Optional[str] = None
    date: date
    start_time: time
    end_time: time
    duration: int
    status: str
    total_amount: int
    notes: Optional[str]
    created_at: datetime
    payment: Optional[PaymentResponse] = None

    model_config = {"from_attributes": True}

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: time) -> str:
        return _format_time(value)


class BookingCreatedResponse(BookingResponse):
    encrypted_reference: str


class BookingSummary(BaseModel):
    """Booking fields shown alongside a payment in admin listings."""

    id: int
    booking_number: str
    customer_name: str
    customer_email: str
    customer_phone: str
    court_id: int
    court_name: Optional[str] = None
    date: date
    start_time: time
    end_time: time
    status: str
    total_amount: int

    model_config = {"from_attributes": True}

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: time) -> str:
        return _format_time(value)


class PendingPaymentResponse(PaymentResponse):
    booking: BookingSummary
