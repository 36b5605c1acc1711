"""Inclusive calendar-day arithmetic used by every counting method."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Iterator, List, Tuple

Interval = Tuple[date, date]


def count_inclusive_days(start: date, end: date) -> int:
    """Days from start to end, both included. 0 when end is before start."""
    if end < start:
        return 0
    return (end - start).days + 1


def clamp(value: date, lower: date, upper: date) -> date:
    return max(lower, min(value, upper))


def iter_days(start: date, end: date) -> Iterator[date]:
    for i in range(count_inclusive_days(start, end)):
        yield start + timedelta(days=i)


def clip_interval(start: date, end: date, window_start: date, window_end: date) -> Interval | None:
    """Intersect [start, end] with the window; None when they do not overlap."""
    if end < window_start or start > window_end:
        return None
    s = clamp(start, window_start, window_end)
    e = clamp(end, window_start, window_end)
    if e < s:
        return None
    return s, e


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Sort and merge overlapping or adjacent intervals."""
    ordered = sorted((s, e) for s, e in intervals if e >= s)
    if not ordered:
        return []
    merged: List[Interval] = []
    cur_start, cur_end = ordered[0]
    for s, e in ordered[1:]:
        if s <= cur_end + timedelta(days=1):
            # Overlapping or contiguous
            cur_end = max(cur_end, e)
        else:
            merged.append((cur_start, cur_end))
            cur_start, cur_end = s, e
    merged.append((cur_start, cur_end))
    return merged


def union_days_covered(intervals: Iterable[Interval], window_start: date, window_end: date) -> int:
    """Distinct calendar days inside [window_start, window_end] covered by any interval.

    Intervals are clipped to the window first; anything entirely outside is dropped.
    Overlapping intervals never count a day twice.
    """
    clipped = []
    for start, end in intervals:
        piece = clip_interval(start, end, window_start, window_end)
        if piece is not None:
            clipped.append(piece)
    return sum(count_inclusive_days(s, e) for s, e in merge_intervals(clipped))
