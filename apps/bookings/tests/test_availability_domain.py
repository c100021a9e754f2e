"""Tests for the pure availability and calendar arithmetic."""

from datetime import date
from decimal import Decimal

import pytest

from apps.bookings.domain.availability import (
    BookedPeriod,
    analyze_availability,
    analyze_conflict,
    find_grace_period_violations,
    grace_days,
)
from apps.bookings.domain.calendar import StayFigures, build_calendar_days, compute_occupancy
from shared.domain.value_objects import DateRange

VILLA_A = BookedPeriod(1, "CONFIRMED", date(2025, 6, 1), date(2025, 6, 5), "Martin")
VILLA_B = BookedPeriod(2, "BLOCKED", date(2025, 6, 10), date(2025, 6, 15))


@pytest.mark.parametrize(
    "start,end,expected",
    [
        (date(2025, 5, 28), date(2025, 6, 1), None),
        (date(2025, 6, 5), date(2025, 6, 8), None),
        (date(2025, 5, 30), date(2025, 6, 6), "encompassing"),
        (date(2025, 6, 1), date(2025, 6, 5), "encompassing"),
        (date(2025, 6, 2), date(2025, 6, 4), "encompassed"),
        (date(2025, 6, 3), date(2025, 6, 7), "overlap"),
        (date(2025, 5, 29), date(2025, 6, 2), "overlap"),
    ],
)
def test_analyze_conflict(start, end, expected):
    assert analyze_conflict(DateRange(start, end), VILLA_A.dates) == expected


def test_grace_period_violations_on_both_sides():
    request = DateRange(date(2025, 6, 6), date(2025, 6, 9))

    violations = find_grace_period_violations(request, [VILLA_A, VILLA_B], grace_period_hours=48)

    assert [(v.booking_id, v.hours, v.type) for v in violations] == [(1, 24, "after"), (2, 24, "before")]


def test_back_to_back_is_not_a_grace_violation():
    request = DateRange(date(2025, 6, 5), date(2025, 6, 10))

    assert find_grace_period_violations(request, [VILLA_A, VILLA_B], grace_period_hours=48) == []


def test_grace_days_floors_partial_days():
    assert grace_days(2) == 0
    assert grace_days(24) == 1
    assert grace_days(47.5) == 1


def test_analysis_suggests_gap_and_slot_before_first_booking():
    request = DateRange(date(2025, 6, 3), date(2025, 6, 6))

    analysis = analyze_availability(
        request, [VILLA_B, VILLA_A], search=request.expand(7), grace_period_hours=2
    )

    assert not analysis.available
    assert [c.conflict_type for c in analysis.conflicts] == ["overlap"]
    assert [(s.start_date, s.end_date, s.confidence) for s in analysis.suggestions] == [
        (date(2025, 6, 5), date(2025, 6, 8), "high"),
        (date(2025, 5, 29), date(2025, 6, 1), "medium"),
    ]
    assert analysis.suggestions[0].reason == "Available between Martin and BLOCKED"
    assert analysis.suggestions[1].reason == "Available before Martin"


def test_analysis_without_conflicts_has_no_suggestions():
    request = DateRange(date(2025, 6, 6), date(2025, 6, 8))

    analysis = analyze_availability(request, [VILLA_A, VILLA_B], search=request.expand(7), grace_period_hours=48)

    assert analysis.available
    assert analysis.suggestions == []
    assert [v.type for v in analysis.grace_period_violations] == ["after"]


def test_grace_period_narrows_the_gap():
    request = DateRange(date(2025, 6, 3), date(2025, 6, 6))

    analysis = analyze_availability(
        request, [VILLA_A, VILLA_B], search=request.expand(7), grace_period_hours=48, include_nearby_dates=False
    )

    assert analysis.grace_period_violations == []
    assert all(s.confidence != "high" for s in analysis.suggestions)


def test_calendar_marks_check_out_day_as_free():
    days = build_calendar_days(date(2025, 6, 4), date(2025, 6, 6), [VILLA_A])

    assert [d.is_booked for d in days] == [True, False, False]
    assert days[1].is_check_out
    assert not days[0].is_check_in


def test_calendar_rejects_inverted_range():
    with pytest.raises(ValueError):
        build_calendar_days(date(2025, 6, 6), date(2025, 6, 4), [])


def test_occupancy_clips_stays_to_window():
    window = DateRange(date(2025, 6, 1), date(2025, 6, 11))
    stays = [
        StayFigures("CONFIRMED", date(2025, 5, 30), date(2025, 6, 3), Decimal("300")),
        StayFigures("OWNER", date(2025, 6, 5), date(2025, 6, 8)),
        StayFigures("CONFIRMED", date(2025, 7, 1), date(2025, 7, 3), Decimal("999")),
    ]

    figures = compute_occupancy(window, stays)

    assert figures["total_bookings"] == 2
    assert figures["by_type"] == {"CONFIRMED": 1, "OWNER": 1}
    assert figures["total_revenue"] == Decimal("300")
    assert figures["occupied_nights"] == 5
    assert figures["available_nights"] == 10
    assert figures["occupancy_rate"] == Decimal("50.00")
    assert figures["average_stay_length"] == Decimal("3.50")
