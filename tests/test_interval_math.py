"""Unit tests for inclusive day arithmetic and day-set union."""
from datetime import date

from staywatch.services.interval_math import (
    clip_interval,
    count_inclusive_days,
    iter_days,
    merge_intervals,
    union_days_covered,
)


class TestCountInclusiveDays:
    def test_single_day_counts_as_one(self) -> None:
        assert count_inclusive_days(date(2024, 1, 1), date(2024, 1, 1)) == 1

    def test_both_ends_included(self) -> None:
        assert count_inclusive_days(date(2024, 1, 1), date(2024, 1, 30)) == 30

    def test_reversed_range_is_zero(self) -> None:
        assert count_inclusive_days(date(2024, 1, 10), date(2024, 1, 1)) == 0

    def test_spans_leap_day(self) -> None:
        assert count_inclusive_days(date(2024, 2, 28), date(2024, 3, 1)) == 3


def test_iter_days_yields_every_day() -> None:
    assert list(iter_days(date(2024, 2, 28), date(2024, 3, 1))) == [
        date(2024, 2, 28),
        date(2024, 2, 29),
        date(2024, 3, 1),
    ]


class TestClipInterval:
    def test_clips_to_window(self) -> None:
        assert clip_interval(date(2024, 1, 1), date(2024, 1, 31), date(2024, 1, 10), date(2024, 1, 20)) == (
            date(2024, 1, 10),
            date(2024, 1, 20),
        )

    def test_outside_window_is_none(self) -> None:
        assert clip_interval(date(2023, 1, 1), date(2023, 1, 31), date(2024, 1, 1), date(2024, 6, 1)) is None

    def test_touching_window_edge(self) -> None:
        assert clip_interval(date(2023, 12, 20), date(2024, 1, 1), date(2024, 1, 1), date(2024, 6, 1)) == (
            date(2024, 1, 1),
            date(2024, 1, 1),
        )


class TestMergeIntervals:
    def test_merges_overlapping_and_adjacent(self) -> None:
        merged = merge_intervals(
            [
                (date(2024, 1, 20), date(2024, 1, 25)),
                (date(2024, 1, 1), date(2024, 1, 5)),
                (date(2024, 1, 6), date(2024, 1, 10)),
                (date(2024, 1, 3), date(2024, 1, 4)),
            ]
        )
        assert merged == [
            (date(2024, 1, 1), date(2024, 1, 10)),
            (date(2024, 1, 20), date(2024, 1, 25)),
        ]

    def test_empty(self) -> None:
        assert merge_intervals([]) == []


class TestUnionDaysCovered:
    window = (date(2024, 1, 1), date(2024, 12, 31))

    def test_overlapping_days_counted_once(self) -> None:
        intervals = [(date(2024, 1, 1), date(2024, 1, 10)), (date(2024, 1, 5), date(2024, 1, 15))]
        assert union_days_covered(intervals, *self.window) == 15

    def test_same_trip_twice_counted_once(self) -> None:
        trip = (date(2024, 5, 1), date(2024, 5, 10))
        assert union_days_covered([trip, trip], *self.window) == 10

    def test_disjoint_equals_sum_of_clipped_lengths(self) -> None:
        intervals = [
            (date(2023, 12, 25), date(2024, 1, 5)),
            (date(2024, 3, 1), date(2024, 3, 31)),
            (date(2024, 12, 30), date(2025, 1, 10)),
        ]
        expected = sum(
            count_inclusive_days(*clip_interval(s, e, *self.window)) for s, e in intervals
        )
        assert union_days_covered(intervals, *self.window) == expected == 5 + 31 + 2

    def test_nothing_in_window(self) -> None:
        assert union_days_covered([(date(2023, 1, 1), date(2023, 2, 1))], *self.window) == 0
