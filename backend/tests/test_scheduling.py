"""
Tests for the pure scheduling rules: slots, overlap, pricing, operating clock.
"""

from datetime import date, datetime, time, timezone

import pytest

from courtbook.core.exceptions import InvalidRange
from courtbook.services.scheduling import (
    calculate_amount,
    calculate_duration,
    generate_slots,
    has_conflict,
    is_past_slot,
    occupied_hours,
    operating_now,
    operating_today,
    parse_hour,
    slot_end,
)


def test_generate_slots_covers_operating_hours():
    slots = generate_slots()
    assert len(slots) == 16
    assert slots[0] == time(6)
    assert slots[-1] == time(21)
    assert slots == sorted(slots)
    assert slot_end(slots[-1]) == time(22)


@pytest.mark.parametrize(
    "start,end,existing,expected",
    [
        (time(14), time(16), [(time(15), time(17))], True),   # partial overlap
        (time(14), time(16), [(time(16), time(18))], False),  # back-to-back after
        (time(14), time(16), [(time(12), time(14))], False),  # back-to-back before
        (time(10), time(18), [(time(12), time(13))], True),   # containment
        (time(12), time(13), [(time(10), time(18))], True),   # contained
        (time(10), time(11), [], False),
    ],
)
def test_has_conflict_uses_half_open_intervals(start, end, existing, expected):
    assert has_conflict(start, end, existing) is expected


def test_has_conflict_is_symmetric():
    a = (time(8), time(10))
    b = (time(9), time(11))
    assert has_conflict(*a, [b]) == has_conflict(*b, [a])


def test_calculate_amount_and_duration():
    assert calculate_amount(time(14), time(16)) == 598
    assert calculate_duration(time(14), time(16)) == 120
    assert calculate_amount(time(6), time(14)) == 8 * 299


@pytest.mark.parametrize(
    "start,end",
    [
        (time(16), time(14)),
        (time(14), time(14)),
        (time(6), time(15)),  # 9 hours
    ],
)
def test_invalid_ranges_raise(start, end):
    with pytest.raises(InvalidRange):
        calculate_amount(start, end)
    with pytest.raises(InvalidRange):
        calculate_duration(start, end)


def test_occupied_hours():
    assert list(occupied_hours(time(18), time(21))) == [18, 19, 20]


def test_operating_clock_is_utc_plus_eight():
    # 2026-10-19 17:30 UTC is 2026-10-20 01:30 in the operating timezone
    now = datetime(2026, 10, 19, 17, 30, tzinfo=timezone.utc)
    assert operating_now(now).hour == 1
    assert operating_today(now) == date(2026, 10, 20)
    # Naive datetimes are UTC
    assert operating_today(datetime(2026, 10, 19, 17, 30)) == date(2026, 10, 20)


def test_is_past_slot_keeps_current_hour_bookable():
    # 14:30 operating time
    now = datetime(2026, 10, 19, 6, 30, tzinfo=timezone.utc)
    today = date(2026, 10, 19)
    assert is_past_slot(today, time(13), now) is True
    assert is_past_slot(today, time(14), now) is False
    assert is_past_slot(today, time(15), now) is False
    assert is_past_slot(date(2026, 10, 20), time(6), now) is False


def test_parse_hour():
    assert parse_hour("06:00") == time(6)
    assert parse_hour("22:00") == time(22)
    with pytest.raises(ValueError):
        parse_hour("14:30")
    with pytest.raises(ValueError):
        parse_hour("noon")
