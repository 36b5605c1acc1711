"""Compliance calculator: days used, days remaining, risk status and next expiration for one rule."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Hashable, Iterable, List, Optional, Sequence, Tuple

from staywatch.services.interval_math import Interval, clip_interval, union_days_covered
from staywatch.services.rules import CountingMethod, Rule

log = logging.getLogger("uvicorn.error")


class ComplianceStatus(str, enum.Enum):
    safe = "safe"
    warning = "warning"
    danger = "danger"
    critical = "critical"
    exceeded = "exceeded"


# Lower bound (percent of days_allowed, inclusive) of each band above "safe"
STATUS_BANDS: tuple[tuple[int, ComplianceStatus], ...] = (
    (100, ComplianceStatus.exceeded),
    (94, ComplianceStatus.critical),
    (89, ComplianceStatus.danger),
    (67, ComplianceStatus.warning),
)


@dataclass(frozen=True)
class Trip:
    """A continuous stay, inclusive of both start and end."""

    start_date: date
    end_date: date
    jurisdiction_code: Optional[str] = None
    owner: Optional[Hashable] = None

    @property
    def is_valid(self) -> bool:
        return self.end_date >= self.start_date

    @property
    def interval(self) -> Interval:
        return self.start_date, self.end_date


@dataclass(frozen=True)
class Summary:
    jurisdiction_code: str
    days_used: int
    days_allowed: int
    days_remaining: int
    percentage: float
    status: ComplianceStatus
    window_start: date
    window_end: date
    reference_date: date
    counting_method: CountingMethod
    next_expiring_date: Optional[date] = None
    next_expiring_count: int = 0
    trip_count: int = 0


def status_for(days_used: int, days_allowed: int) -> ComplianceStatus:
    """Map used/allowed onto the five fixed bands. Compared as integers so 67/100 is exactly 'warning'."""
    for lower_pct, status in STATUS_BANDS:
        if days_used * 100 >= lower_pct * days_allowed:
            return status
    return ComplianceStatus.safe


def _anchor(year: int, month: int, day: int) -> date:
    # Feb 29 anchor in a non-leap year
    try:
        return date(year, month, day)
    except ValueError:
        return date(year, month, 28)


def window_for(rule: Rule, reference_date: date) -> Tuple[date, date]:
    """Window bounds for the rule as of reference_date (inclusive)."""
    if rule.counting_method == CountingMethod.rolling:
        return reference_date - timedelta(days=rule.window_days - 1), reference_date

    start = _anchor(reference_date.year, rule.reset_month, rule.reset_day)
    if reference_date < start:
        start = _anchor(reference_date.year - 1, rule.reset_month, rule.reset_day)
    end = _anchor(start.year + 1, rule.reset_month, rule.reset_day) - timedelta(days=1)
    return start, end


def counted_range(rule: Rule, reference_date: date) -> Tuple[date, date]:
    """Part of the window in which days count: never after the reference date."""
    window_start, window_end = window_for(rule, reference_date)
    return window_start, min(reference_date, window_end)


def trips_for_rule(rule: Rule, trips: Iterable[Trip], primary_code: Optional[str] = None) -> List[Trip]:
    """Trips that count against this rule. Trips without a code belong to the primary zone."""
    out = []
    for trip in trips:
        if not trip.is_valid:
            log.warning("Skipping trip with end %s before start %s", trip.end_date, trip.start_date)
            continue
        code = trip.jurisdiction_code or None
        if code == rule.code or (code is None and primary_code is not None and rule.code == primary_code):
            out.append(trip)
    return out


def days_used(
    rule: Rule,
    trips: Iterable[Trip],
    reference_date: date,
    primary_code: Optional[str] = None,
) -> int:
    start, end = counted_range(rule, reference_date)
    return union_days_covered((t.interval for t in trips_for_rule(rule, trips, primary_code)), start, end)


def next_expiration(
    trips: Sequence[Trip],
    window_start: date,
    window_end: date,
    window_days: int,
) -> Tuple[Optional[date], int]:
    """Earliest counted day in the window + window_days, and how many trips start counting on that day."""
    clipped_starts = []
    for trip in trips:
        piece = clip_interval(trip.start_date, trip.end_date, window_start, window_end)
        if piece is not None:
            clipped_starts.append(piece[0])
    if not clipped_starts:
        return None, 0
    earliest = min(clipped_starts)
    return earliest + timedelta(days=window_days), clipped_starts.count(earliest)


def calculate(
    rule: Rule,
    trips: Iterable[Trip],
    reference_date: date,
    primary_code: Optional[str] = None,
) -> Summary:
    """Apply rule to trips as of reference_date."""
    relevant = trips_for_rule(rule, trips, primary_code)
    window_start, window_end = window_for(rule, reference_date)
    count_start, count_end = window_start, min(reference_date, window_end)

    used = union_days_covered((t.interval for t in relevant), count_start, count_end)
    contributing = [
        t for t in relevant if clip_interval(t.start_date, t.end_date, count_start, count_end) is not None
    ]

    expiring_date, expiring_count = None, 0
    if rule.is_rolling:
        expiring_date, expiring_count = next_expiration(relevant, window_start, window_end, rule.window_days)

    return Summary(
        jurisdiction_code=rule.code,
        days_used=used,
        days_allowed=rule.days_allowed,
        days_remaining=max(0, rule.days_allowed - used),
        percentage=round(used / rule.days_allowed * 100, 1),
        status=status_for(used, rule.days_allowed),
        window_start=window_start,
        window_end=window_end,
        reference_date=reference_date,
        counting_method=rule.counting_method,
        next_expiring_date=expiring_date,
        next_expiring_count=expiring_count,
        trip_count=len(contributing),
    )
