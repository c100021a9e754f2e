"""
Calendar grid and occupancy figures

- build_calendar_days: one entry per day, tagged with the bookings covering it
- compute_occupancy: nights, revenue and occupancy rate for a window
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence

from shared.domain.value_objects import DateRange

from .availability import BookedPeriod

TWO_PLACES = Decimal('0.01')


@dataclass
class CalendarDay:
    date: date
    bookings: List[BookedPeriod] = field(default_factory=list)
    is_check_in: bool = False
    is_check_out: bool = False

    @property
    def is_booked(self) -> bool:
        return bool(self.bookings)


def build_calendar_days(first_day: date, last_day: date, periods: Iterable[BookedPeriod]) -> List[CalendarDay]:
    """
    Tag every day of the inclusive range [first_day, last_day]

    A day belongs to a booking when the booking's half-open range contains
    it, so the check-out day is free but flagged ``is_check_out``.
    """
    if last_day < first_day:
        raise ValueError("Calendar end must not be before its start")

    periods = list(periods)
    days = []
    current = first_day
    while current <= last_day:
        day = CalendarDay(date=current)
        for period in periods:
            if period.dates.contains(current):
                day.bookings.append(period)
            if period.start_date == current:
                day.is_check_in = True
            if period.end_date == current:
                day.is_check_out = True
        days.append(day)
        current += timedelta(days=1)
    return days


@dataclass(frozen=True)
class StayFigures:
    """A booking's contribution to occupancy"""
    type: str
    start_date: date
    end_date: date
    total_amount: Optional[Decimal] = None


def _round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def compute_occupancy(window: DateRange, stays: Sequence[StayFigures]) -> dict:
    """
    Occupancy for a window

    Nights are clipped to the window; the average stay length uses the
    full length of each stay.
    """
    occupied = 0
    revenue = Decimal('0')
    by_type: Counter = Counter()
    counted = 0
    full_nights = 0

    for stay in stays:
        clipped = DateRange(stay.start_date, stay.end_date).clip(window)
        if clipped is None:
            continue
        counted += 1
        occupied += len(clipped)
        full_nights += (stay.end_date - stay.start_date).days
        revenue += stay.total_amount or Decimal('0')
        by_type[stay.type] += 1

    possible = len(window)
    rate = Decimal(occupied * 100) / Decimal(possible) if possible else Decimal('0')
    average = Decimal(full_nights) / Decimal(counted) if counted else Decimal('0')

    return {
        'total_bookings': counted,
        'by_type': dict(by_type),
        'total_revenue': revenue,
        'occupied_nights': occupied,
        'available_nights': possible,
        'occupancy_rate': _round2(rate),
        'average_stay_length': _round2(average),
    }
