"""
Pure scheduling rules: the slot catalog, interval overlap, server-side
pricing and the operating clock.

All "is this in the past" decisions use the court's fixed operating timezone
(UTC+8 by default), never the caller's locale or the server's local time.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional, TypeVar

from courtbook.core.config import get_settings
from courtbook.core.exceptions import InvalidRange

T = TypeVar("T")

SLOT_MINUTES = 60


def operating_timezone() -> timezone:
    return timezone(timedelta(hours=get_settings().OPERATING_UTC_OFFSET_HOURS))


def operating_now(now: Optional[datetime] = None) -> datetime:
    """Current time (or ``now``) expressed in the operating timezone.

    Naive datetimes are taken to be UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(operating_timezone())


def operating_today(now: Optional[datetime] = None) -> date:
    return operating_now(now).date()


def generate_slots() -> list[time]:
    """One slot per whole hour from opening (inclusive) to closing (exclusive)."""
    settings = get_settings()
    return [time(hour=h) for h in range(settings.OPENING_HOUR, settings.CLOSING_HOUR)]


def slot_end(slot: time) -> time:
    """End of a one-hour slot. The last slot of the day ends at closing time."""
    return time(hour=slot.hour + 1)


def has_conflict(start: T, end: T, existing: Iterable[tuple[T, T]]) -> bool:
    """Half-open overlap test: [s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1.

    Back-to-back intervals (one ends exactly where the other starts) do not
    conflict. ``existing`` must only contain active bookings.
    """
    return any(start < other_end and other_start < end for other_start, other_end in existing)


def booking_hours(start_time: time, end_time: time) -> int:
    return end_time.hour - start_time.hour


def _checked_hours(start_time: time, end_time: time) -> int:
    hours = booking_hours(start_time, end_time)
    if hours <= 0:
        raise InvalidRange("End time must be after start time")
    if hours > get_settings().MAX_BOOKING_HOURS:
        raise InvalidRange(
            f"Maximum booking duration is {get_settings().MAX_BOOKING_HOURS} hours"
        )
    return hours


def calculate_amount(start_time: time, end_time: time) -> int:
    """Total price in pesos; client-supplied amounts are never trusted."""
    return _checked_hours(start_time, end_time) * get_settings().HOURLY_RATE


def calculate_duration(start_time: time, end_time: time) -> int:
    """Booking length in minutes."""
    return _checked_hours(start_time, end_time) * SLOT_MINUTES


def occupied_hours(start_time: time, end_time: time) -> range:
    return range(start_time.hour, end_time.hour)


def is_past_slot(day: date, slot: time, now: Optional[datetime] = None) -> bool:
    """A slot is past when it is today and its hour is before the current hour.

    The current, partially elapsed hour still counts as bookable.
    """
    local_now = operating_now(now)
    return day == local_now.date() and slot.hour < local_now.hour


def parse_hour(value: str) -> time:
    """Parse an on-the-hour ``HH:00`` string."""
    hours, _, minutes = value.partition(":")
    if not hours.isdigit() or minutes != "00":
        raise ValueError(f"Invalid time {value!r}, expected HH:00")
    return time(hour=int(hours))
