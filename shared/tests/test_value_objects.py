"""Tests for shared value objects."""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal

import pytest

from shared.domain.value_objects import DateRange, TimeWindow, quantize_money


def test_quantize_money_rounds_half_up():
    assert quantize_money(Decimal("2.345")) == Decimal("2.35")
    assert quantize_money(Decimal("2.344")) == Decimal("2.34")
    assert quantize_money(Decimal("0.005")) == Decimal("0.01")


def test_date_range_length_is_billable_days():
    assert len(DateRange(date(2030, 1, 10), date(2030, 1, 13))) == 3


def test_date_range_requires_start_before_end():
    with pytest.raises(ValueError):
        DateRange(date(2030, 1, 10), date(2030, 1, 10))


def test_date_ranges_sharing_a_boundary_day_overlap():
    booked = DateRange(date(2030, 1, 10), date(2030, 1, 13))
    assert booked.overlaps_with(DateRange(date(2030, 1, 13), date(2030, 1, 16)))
    assert booked.overlaps_with(DateRange(date(2030, 1, 12), date(2030, 1, 15)))
    assert not booked.overlaps_with(DateRange(date(2030, 1, 14), date(2030, 1, 16)))


def test_adjacent_time_windows_do_not_overlap():
    day = date(2030, 1, 10)
    lunch = TimeWindow(day, time(12), time(14))
    assert not lunch.overlaps_with(TimeWindow(day, time(14), time(16)))
    assert lunch.overlaps_with(TimeWindow(day, time(13), time(15)))
    assert not lunch.overlaps_with(TimeWindow(date(2030, 1, 11), time(12), time(14)))


def test_time_window_duration_hours():
    window = TimeWindow(date(2030, 1, 10), time(18, 0), time(20, 30))
    assert window.duration_hours == Decimal("2.5")


def test_time_window_rejects_reversed_times():
    with pytest.raises(ValueError):
        TimeWindow(date(2030, 1, 10), time(20), time(18))
