"""
Booking model representing a customer's reservation of a court.

Key design decisions:
- start_time/end_time are on-the-hour times forming a half-open interval
- duration and total_amount are always computed server-side
- verification_token is generated once and never leaves the server except
  inside an encrypted booking reference
- Overlap prevention is enforced by SlotReservation rows, not by this table
"""

import enum
import secrets

from sqlalchemy import (
    Column, Integer, String, Date, Time, ForeignKey, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship

from courtbook.db.base import Base, TimestampMixin
from courtbook.services.scheduling import operating_today


class BookingStatus(str, enum.Enum):
    PENDING_VERIFICATION = "PENDING_VERIFICATION"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


ACTIVE_BOOKING_STATUSES = (
    BookingStatus.CONFIRMED.value,
    BookingStatus.PENDING_VERIFICATION.value,
)


def generate_booking_number() -> str:
    """BK-YYYYMMDD-XXXXXX, dated in the operating timezone."""
    return f"BK-{operating_today():%Y%m%d}-{secrets.token_hex(3).upper()}"


def generate_verification_token() -> str:
    # 32 random bytes = 256 bits
    return secrets.token_hex(32)


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_number = Column(
        String(32), unique=True, nullable=False, index=True, default=generate_booking_number
    )

    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(20), nullable=False)

    court_id = Column(Integer, ForeignKey("courts.id"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    status = Column(
        String(30), nullable=False, default=BookingStatus.PENDING_VERIFICATION.value
    )
    total_amount = Column(Integer, nullable=False)
    notes = Column(String(500), nullable=True)
    verification_token = Column(String(64), nullable=False, default=generate_verification_token)

    # Relationships
    court = relationship("Court", lazy="selectin")
    payment = relationship(
        "Payment", back_populates="booking", uselist=False, lazy="selectin",
        cascade="all, delete-orphan",
    )
    reservations = relationship(
        "SlotReservation", back_populates="booking", cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="check_booking_time_range"),
        CheckConstraint("duration > 0", name="check_booking_duration_positive"),
        CheckConstraint("total_amount >= 0", name="check_booking_amount_non_negative"),
        CheckConstraint(
            "status IN ('PENDING_VERIFICATION', 'CONFIRMED', 'CANCELLED', 'COMPLETED')",
            name="check_booking_status",
        ),
        # Availability and conflict queries filter on (court_id, date, status)
        Index("ix_bookings_court_date_status", "court_id", "date", "status"),
    )

    @property
    def court_name(self) -> str | None:
        return self.court.name if self.court is not None else None

    @property
    def start_hour(self) -> int:
        return self.start_time.hour

    @property
    def end_hour(self) -> int:
        return self.end_time.hour

    def __repr__(self) -> str:
        return (
            f"<Booking(number={self.booking_number}, court={self.court_id}, date={self.date}, "
            f"{self.start_time}-{self.end_time}, status={self.status})>"
        )
