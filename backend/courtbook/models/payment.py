"""
Payment model: a manually entered e-wallet reference awaiting admin review.

booking_id is unique, so a booking has at most one payment.
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from courtbook.db.base import Base, TimestampMixin


class PaymentMethod(str, enum.Enum):
    GCASH = "GCASH"
    MAYA = "MAYA"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class Payment(Base, TimestampMixin):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    payment_method = Column(String(10), nullable=False)
    reference_code = Column(String(100), nullable=False)
    amount = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value, index=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    verified_by = Column(String(64), nullable=True)
    rejection_reason = Column(String(500), nullable=True)

    booking = relationship("Booking", back_populates="payment", lazy="selectin")

    __table_args__ = (
        CheckConstraint("payment_method IN ('GCASH', 'MAYA')", name="check_payment_method"),
        CheckConstraint(
            "status IN ('PENDING', 'VERIFIED', 'REJECTED')", name="check_payment_status"
        ),
        CheckConstraint(
            "status != 'REJECTED' OR rejection_reason IS NOT NULL",
            name="check_payment_rejection_reason",
        ),
    )

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, booking={self.booking_id}, status={self.status})>"
