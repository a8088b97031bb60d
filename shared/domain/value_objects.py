"""
Common Value Objects

Value objects used across multiple domains:
- quantize_money: the single rounding rule for displayed amounts
- DateRange: A range of calendar days (hall bookings, hotel stays)
- TimeWindow: A start/end time on a single day (tables, cafe slots)
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from shared.domain.base import ValueObject

CENT = Decimal('0.01')


def quantize_money(amount: Decimal) -> Decimal:
    """Round half-up to two decimal places"""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    start_date and end_date are both calendar days. A hall booked from the
    10th to the 13th occupies the hall on the 10th, 11th, 12th and 13th, and
    is priced for (end - start) days.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Inclusive overlap: ranges sharing a boundary day do overlap.

        Examples:
            - DateRange(10, 13) overlaps with DateRange(12, 15) -> True
            - DateRange(10, 13) overlaps with DateRange(13, 16) -> True
            - DateRange(10, 13) overlaps with DateRange(14, 16) -> False
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return self.start_date <= other.end_date and self.end_date >= other.start_date

    def __len__(self) -> int:
        """Number of billable days"""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.strftime('%d.%m.%Y')} - {self.end_date.strftime('%d.%m.%Y')}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"


@dataclass(frozen=True)
class TimeWindow(ValueObject):
    """
    Time window on a single day, half-open: [start_time, end_time)

    Adjacent windows (12:00-14:00 and 14:00-16:00) do not overlap.
    """
    day: date
    start_time: time
    end_time: time

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise ValueError(f"Start time ({self.start_time}) must be before end time ({self.end_time})")

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.day, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.day, self.end_time)

    @property
    def duration(self) -> timedelta:
        return self.ends_at - self.starts_at

    @property
    def duration_hours(self) -> Decimal:
        return Decimal(int(self.duration.total_seconds())) / Decimal(3600)

    def overlaps_with(self, other: 'TimeWindow') -> bool:
        if not isinstance(other, TimeWindow):
            raise TypeError("Can only check overlap with another TimeWindow")
        if self.day != other.day:
            return False
        return self.start_time < other.end_time and self.end_time > other.start_time

    def __str__(self):
        return f"{self.day.isoformat()} {self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"
