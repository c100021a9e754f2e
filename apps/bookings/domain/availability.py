"""
Availability analysis

Pure date arithmetic over the booked periods of one property:
- analyze_conflict: classify how a requested range collides with a booking
- find_grace_period_violations: turnovers that leave less than the grace period
- suggest_alternatives: free slots of the requested length near the request
- analyze_availability: the combination used by the advanced availability check

Booked periods are half-open ``[start_date, end_date)``. Gaps are measured
in hours between midnights, so a one-day gap is 24 hours.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from shared.domain.value_objects import DateRange

HOURS_PER_DAY = 24

SEVERITY_BLOCKING = 'blocking'
SEVERITY_WARNING = 'warning'

CONFLICT_OVERLAP = 'overlap'
CONFLICT_ENCOMPASSING = 'encompassing'
CONFLICT_ENCOMPASSED = 'encompassed'


@dataclass(frozen=True)
class BookedPeriod:
    """Snapshot of a booking as seen by the availability analysis"""
    id: int
    type: str
    start_date: date
    end_date: date
    guest_name: str = ''

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def label(self) -> str:
        return self.guest_name or self.type


@dataclass(frozen=True)
class Conflict:
    booking: BookedPeriod
    conflict_type: str
    severity: str = SEVERITY_BLOCKING


@dataclass(frozen=True)
class GracePeriodViolation:
    booking_id: int
    hours: float
    # 'after': the request starts too soon after the booking ends
    # 'before': the request ends too close before the booking starts
    type: str


@dataclass(frozen=True)
class Suggestion:
    start_date: date
    end_date: date
    reason: str
    confidence: str


@dataclass
class AvailabilityAnalysis:
    conflicts: List[Conflict] = field(default_factory=list)
    grace_period_violations: List[GracePeriodViolation] = field(default_factory=list)
    suggestions: List[Suggestion] = field(default_factory=list)
    warnings: List[dict] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return not any(c.severity == SEVERITY_BLOCKING for c in self.conflicts)


def analyze_conflict(request: DateRange, booked: DateRange) -> Optional[str]:
    """
    Return the conflict type, or None when the ranges don't collide

    - encompassing: the request covers the whole booking
    - encompassed: the booking covers the whole request
    - overlap: partial overlap on one side
    """
    if request.end_date <= booked.start_date or request.start_date >= booked.end_date:
        return None
    if request.start_date <= booked.start_date and request.end_date >= booked.end_date:
        return CONFLICT_ENCOMPASSING
    if booked.start_date <= request.start_date and booked.end_date >= request.end_date:
        return CONFLICT_ENCOMPASSED
    return CONFLICT_OVERLAP


def _gap_hours(later: date, earlier: date) -> int:
    return (later - earlier).days * HOURS_PER_DAY


def find_grace_period_violations(
    request: DateRange,
    periods: Iterable[BookedPeriod],
    grace_period_hours: float,
) -> List[GracePeriodViolation]:
    violations = []
    for period in periods:
        hours_before = _gap_hours(request.start_date, period.end_date)
        hours_after = _gap_hours(period.start_date, request.end_date)
        if 0 < hours_before < grace_period_hours:
            violations.append(GracePeriodViolation(period.id, round(hours_before, 1), 'after'))
        if 0 < hours_after < grace_period_hours:
            violations.append(GracePeriodViolation(period.id, round(hours_after, 1), 'before'))
    return violations


def grace_days(grace_period_hours: float) -> int:
    """Whole days a grace period pushes a turnover; partial days don't move a date."""
    return int(grace_period_hours // HOURS_PER_DAY)


def suggest_alternatives(
    request: DateRange,
    periods: Sequence[BookedPeriod],
    search: DateRange,
    grace_period_hours: float,
    limit: int = 5,
) -> List[Suggestion]:
    """
    Propose free slots with the requested number of nights

    Periods must be sorted by start date. Gaps between consecutive
    bookings come first (high confidence), then the slot before the first
    booking and the slot after the last one (medium confidence).
    """
    if not periods:
        return []

    nights = timedelta(days=len(request))
    grace = timedelta(days=grace_days(grace_period_hours))
    suggestions: List[Suggestion] = []

    for current, following in zip(periods, periods[1:]):
        gap_start = current.end_date + grace
        gap_end = following.start_date - grace
        if gap_end - gap_start >= nights:
            suggestions.append(Suggestion(
                start_date=gap_start,
                end_date=gap_start + nights,
                reason=f"Available between {current.label} and {following.label}",
                confidence='high',
            ))

    first = periods[0]
    before_end = first.start_date - grace
    before_start = before_end - nights
    if before_start >= search.start_date:
        suggestions.append(Suggestion(
            start_date=before_start,
            end_date=before_end,
            reason=f"Available before {first.label}",
            confidence='medium',
        ))

    last = periods[-1]
    after_start = last.end_date + grace
    after_end = after_start + nights
    if after_end <= search.end_date:
        suggestions.append(Suggestion(
            start_date=after_start,
            end_date=after_end,
            reason=f"Available after {last.label}",
            confidence='medium',
        ))

    return suggestions[:limit]


def analyze_availability(
    request: DateRange,
    periods: Sequence[BookedPeriod],
    *,
    search: DateRange,
    grace_period_hours: float = 2,
    include_nearby_dates: bool = True,
    suggest: bool = True,
    max_suggestions: int = 5,
) -> AvailabilityAnalysis:
    """Classify conflicts, grace violations and alternatives for a request."""
    ordered = sorted(periods, key=lambda p: (p.start_date, p.end_date))
    analysis = AvailabilityAnalysis()

    for period in ordered:
        conflict_type = analyze_conflict(request, period.dates)
        if conflict_type is not None:
            analysis.conflicts.append(Conflict(period, conflict_type))

    if include_nearby_dates:
        analysis.grace_period_violations = find_grace_period_violations(request, ordered, grace_period_hours)

    if suggest and analysis.conflicts:
        analysis.suggestions = suggest_alternatives(
            request, ordered, search, grace_period_hours, limit=max_suggestions
        )

    return analysis
