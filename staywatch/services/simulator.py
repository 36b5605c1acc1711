"""What-if planning: check a proposed trip against a rule without storing it.

Every check recounts the window as of each day of the proposed trip, with the
proposed trip truncated to that day. The searches are plain forward scans so the
first safe start date (earliest first) and the longest safe length (shortest to
longest) are deterministic.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, List, Optional, Sequence, Tuple

from staywatch.services.compliance import Trip, counted_range, trips_for_rule
from staywatch.services.interval_math import count_inclusive_days, iter_days, union_days_covered
from staywatch.services.rules import Rule

DEFAULT_SEARCH_HORIZON_DAYS = 365


class ReferencePolicy(str, enum.Enum):
    """Which days of the proposed trip are used as reference dates."""

    each_day = "each_day"
    trip_end = "trip_end"


@dataclass(frozen=True)
class SimulationResult:
    would_violate: bool
    violations: List[date] = field(default_factory=list)
    max_days_used: int = 0
    days_over_limit: int = 0
    proposed_length: int = 0
    earliest_safe_date: Optional[date] = None
    max_safe_length: int = 0


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def days_used_with_proposed(
    rule: Rule,
    existing: Sequence[Trip],
    proposed_start: date,
    reference_date: date,
) -> int:
    """Days counted as of reference_date, with the proposed trip running from proposed_start to reference_date.

    existing must already be filtered to the rule (see trips_for_rule).
    """
    start, end = counted_range(rule, reference_date)
    intervals = [t.interval for t in existing]
    intervals.append((proposed_start, reference_date))
    return union_days_covered(intervals, start, end)


def _check_days(proposed_start: date, proposed_end: date, policy: ReferencePolicy) -> Iterator[date]:
    if policy == ReferencePolicy.trip_end:
        yield proposed_end
    else:
        yield from iter_days(proposed_start, proposed_end)


def _scan(
    rule: Rule,
    existing: Sequence[Trip],
    proposed_start: date,
    proposed_end: date,
    policy: ReferencePolicy = ReferencePolicy.each_day,
    stop_at_first: bool = False,
) -> Tuple[List[date], int]:
    violations: List[date] = []
    max_used = 0
    for day in _check_days(proposed_start, proposed_end, policy):
        used = days_used_with_proposed(rule, existing, proposed_start, day)
        max_used = max(max_used, used)
        if used > rule.days_allowed:
            violations.append(day)
            if stop_at_first:
                break
    return violations, max_used


def _is_safe(rule: Rule, existing: Sequence[Trip], start: date, length: int) -> bool:
    violations, _ = _scan(rule, existing, start, start + timedelta(days=length - 1), stop_at_first=True)
    return not violations


def _earliest_safe_start(
    rule: Rule, existing: Sequence[Trip], trip_length: int, first: date, horizon_days: int
) -> Optional[date]:
    if trip_length < 1:
        return None
    candidate = first
    for _ in range(horizon_days):
        if _is_safe(rule, existing, candidate, trip_length):
            return candidate
        candidate += timedelta(days=1)
    return None


def _max_safe_length(rule: Rule, existing: Sequence[Trip], start_date: date) -> int:
    max_length = 0
    for length in range(1, rule.days_allowed + 1):
        if not _is_safe(rule, existing, start_date, length):
            break
        max_length = length
    return max_length


def find_earliest_safe_start(
    rule: Rule,
    existing_trips: Sequence[Trip],
    trip_length: int,
    *,
    today: Optional[date] = None,
    horizon_days: int = DEFAULT_SEARCH_HORIZON_DAYS,
    primary_code: Optional[str] = None,
) -> Optional[date]:
    """First start date from today onwards where a trip of trip_length never exceeds the limit.

    Returns None when no candidate within horizon_days works.
    """
    existing = trips_for_rule(rule, existing_trips, primary_code)
    return _earliest_safe_start(rule, existing, trip_length, today or _utc_today(), horizon_days)


def find_max_safe_length(
    rule: Rule,
    existing_trips: Sequence[Trip],
    start_date: date,
    *,
    primary_code: Optional[str] = None,
) -> int:
    """Longest trip starting on start_date that stays within the limit (0 if a single day is too many)."""
    return _max_safe_length(rule, trips_for_rule(rule, existing_trips, primary_code), start_date)


def simulate(
    rule: Rule,
    existing_trips: Sequence[Trip],
    proposed_start: date,
    proposed_end: date,
    reference_policy: ReferencePolicy = ReferencePolicy.each_day,
    *,
    today: Optional[date] = None,
    horizon_days: int = DEFAULT_SEARCH_HORIZON_DAYS,
    primary_code: Optional[str] = None,
) -> SimulationResult:
    """Evaluate a proposed trip in rule's jurisdiction against the existing trips."""
    if proposed_end < proposed_start:
        raise ValueError("Proposed trip end date cannot be before start date")
    existing = trips_for_rule(rule, existing_trips, primary_code)
    violations, max_used = _scan(rule, existing, proposed_start, proposed_end, ReferencePolicy(reference_policy))
    length = count_inclusive_days(proposed_start, proposed_end)
    would_violate = bool(violations)

    earliest = None
    if would_violate:
        earliest = _earliest_safe_start(rule, existing, length, today or _utc_today(), horizon_days)

    return SimulationResult(
        would_violate=would_violate,
        violations=violations,
        max_days_used=max_used,
        days_over_limit=max(0, max_used - rule.days_allowed),
        proposed_length=length,
        earliest_safe_date=earliest,
        max_safe_length=_max_safe_length(rule, existing, proposed_start),
    )
