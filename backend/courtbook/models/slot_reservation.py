"""
One row per occupied hour of an active booking.

The unique constraint on (court_id, date, hour) is what actually prevents two
concurrent requests from double-booking a court: whichever transaction flushes
second fails with an IntegrityError, regardless of what either one read
beforehand. Rows are deleted when their booking is cancelled.
"""

from sqlalchemy import Column, Integer, Date, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from courtbook.db.base import Base


class SlotReservation(Base):
    __tablename__ = "slot_reservations"

    id = Column(Integer, primary_key=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    court_id = Column(Integer, ForeignKey("courts.id"), nullable=False)
    date = Column(Date, nullable=False)
    hour = Column(Integer, nullable=False)

    booking = relationship("Booking", back_populates="reservations")

    __table_args__ = (
        UniqueConstraint("court_id", "date", "hour", name="uq_slot_reservation_court_date_hour"),
        CheckConstraint("hour >= 0 AND hour < 24", name="check_slot_reservation_hour"),
    )

    def __repr__(self) -> str:
        return f"<SlotReservation(court={self.court_id}, date={self.date}, hour={self.hour})>"
