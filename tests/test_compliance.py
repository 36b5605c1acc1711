"""Unit tests for the compliance calculator."""
from datetime import date, timedelta

import pytest

from factories import schengen_trips
from staywatch.services.compliance import (
    ComplianceStatus,
    Trip,
    calculate,
    days_used,
    status_for,
    window_for,
)
from staywatch.services.rules import Rule


class TestRollingScenarios:
    def test_sixty_one_days(self, schengen: Rule) -> None:
        """Jan (30 days) + Mar (31 days) 2024, as of 2024-06-01. 61/90 is past the 67% warning line."""
        ref = date(2024, 6, 1)
        summary = calculate(schengen, schengen_trips(), ref)

        assert summary.days_used == 61
        assert summary.days_remaining == 29
        assert summary.status is ComplianceStatus.warning
        assert summary.window_start == ref - timedelta(days=179)
        assert summary.window_end == ref
        assert summary.percentage == 67.8
        assert summary.trip_count == 2

    def test_next_expiration_is_earliest_day_plus_window(self, schengen: Rule) -> None:
        summary = calculate(schengen, schengen_trips(), date(2024, 6, 1))
        assert summary.next_expiring_date == date(2024, 1, 1) + timedelta(days=180)
        assert summary.next_expiring_count == 1

    def test_next_expiration_counts_trips_starting_together(self, schengen: Rule) -> None:
        ref = date(2024, 6, 1)
        window_start = ref - timedelta(days=179)
        trips = [
            Trip(window_start - timedelta(days=30), window_start + timedelta(days=10), "schengen"),
            Trip(window_start - timedelta(days=3), window_start + timedelta(days=2), "schengen"),
            Trip(date(2024, 5, 1), date(2024, 5, 5), "schengen"),
        ]
        summary = calculate(schengen, trips, ref)
        assert summary.next_expiring_date == window_start + timedelta(days=180)
        assert summary.next_expiring_count == 2

    def test_exceeded(self, schengen: Rule) -> None:
        trips = [
            Trip(date(2024, 2, 1), date(2024, 3, 31), "schengen"),  # 60 days
            Trip(date(2024, 4, 10), date(2024, 5, 14), "schengen"),  # 35 days
        ]
        summary = calculate(schengen, trips, date(2024, 6, 1))

        assert summary.days_used == 95
        assert summary.days_remaining == 0
        assert summary.status is ComplianceStatus.exceeded
        assert summary.percentage >= 100

    def test_trips_outside_window_do_not_count(self, schengen: Rule) -> None:
        trips = [Trip(date(2023, 1, 1), date(2023, 2, 1), "schengen")]
        summary = calculate(schengen, trips, date(2024, 6, 1))
        assert summary.days_used == 0
        assert summary.trip_count == 0
        assert summary.next_expiring_date is None
        assert summary.next_expiring_count == 0

    def test_future_days_do_not_count(self, schengen: Rule) -> None:
        trips = [Trip(date(2024, 5, 25), date(2024, 6, 10), "schengen")]
        assert days_used(schengen, trips, date(2024, 6, 1)) == 8

    def test_overlapping_trips_count_each_day_once(self, schengen: Rule) -> None:
        trips = [
            Trip(date(2024, 1, 1), date(2024, 1, 10), "schengen"),
            Trip(date(2024, 1, 5), date(2024, 1, 15), "schengen"),
        ]
        assert calculate(schengen, trips, date(2024, 2, 1)).days_used == 15

    def test_invalid_trip_is_skipped(self, schengen: Rule) -> None:
        trips = [Trip(date(2024, 1, 10), date(2024, 1, 1), "schengen")] + schengen_trips()
        assert calculate(schengen, trips, date(2024, 6, 1)).days_used == 61

    def test_monotonic_until_days_expire(self, schengen: Rule) -> None:
        trips = schengen_trips() + [Trip(date(2024, 5, 20), date(2024, 6, 20), "schengen")]
        ref = date(2024, 5, 1)
        previous = days_used(schengen, trips, ref)
        for _ in range(240):
            dropped_day = window_for(schengen, ref)[0]
            ref += timedelta(days=1)
            current = days_used(schengen, trips, ref)
            if current < previous:
                assert any(t.start_date <= dropped_day <= t.end_date for t in trips)
            previous = current


class TestJurisdictionFiltering:
    def test_uncoded_trips_belong_to_primary_zone(self, schengen: Rule) -> None:
        trips = [Trip(date(2024, 3, 1), date(2024, 3, 10))]
        assert calculate(schengen, trips, date(2024, 4, 1), primary_code="schengen").days_used == 10
        assert calculate(schengen, trips, date(2024, 4, 1)).days_used == 0

    def test_other_jurisdiction_trips_ignored(self, schengen: Rule) -> None:
        us_vwp = Rule("us_vwp", 90, 180)
        trips = [
            Trip(date(2024, 3, 1), date(2024, 3, 10)),
            Trip(date(2024, 3, 15), date(2024, 3, 19), "us_vwp"),
        ]
        assert calculate(schengen, trips, date(2024, 4, 1), "schengen").days_used == 10
        assert calculate(us_vwp, trips, date(2024, 4, 1), "schengen").days_used == 5


class TestYearRules:
    def test_calendar_year_resets(self, us_ny: Rule) -> None:
        trips = [Trip(date(2024, 6, 1), date(2024, 12, 31), "us_ny")]
        summary = calculate(us_ny, trips, date(2025, 1, 15))

        assert summary.window_start == date(2025, 1, 1)
        assert summary.window_end == date(2025, 12, 31)
        assert summary.days_used == 0
        assert summary.status is ComplianceStatus.safe
        assert summary.next_expiring_date is None

    def test_calendar_year_before_reset(self, us_ny: Rule) -> None:
        trips = [Trip(date(2024, 6, 1), date(2024, 12, 31), "us_ny")]
        summary = calculate(us_ny, trips, date(2024, 12, 31))
        assert summary.days_used == 214
        assert summary.status is ComplianceStatus.exceeded

    def test_later_days_in_year_not_counted_yet(self, us_ny: Rule) -> None:
        trips = [Trip(date(2024, 2, 1), date(2024, 2, 10), "us_ny"), Trip(date(2024, 8, 1), date(2024, 8, 31), "us_ny")]
        assert calculate(us_ny, trips, date(2024, 3, 1)).days_used == 10

    def test_fiscal_year_anchor(self) -> None:
        uk_tax = Rule("uk_tax_year", 183, 365, "fiscal_year", reset_month=4, reset_day=6)
        assert window_for(uk_tax, date(2024, 4, 5)) == (date(2023, 4, 6), date(2024, 4, 5))
        assert window_for(uk_tax, date(2024, 4, 6)) == (date(2024, 4, 6), date(2025, 4, 5))

    def test_leap_day_anchor_in_common_year(self) -> None:
        rule = Rule("leap", 10, 0, "fiscal_year", reset_month=2, reset_day=29)
        assert window_for(rule, date(2023, 3, 1)) == (date(2023, 2, 28), date(2024, 2, 28))
        assert window_for(rule, date(2024, 3, 1)) == (date(2024, 2, 29), date(2025, 2, 27))


class TestStatusBands:
    @pytest.mark.parametrize(
        "used, expected",
        [
            (0, ComplianceStatus.safe),
            (66, ComplianceStatus.safe),
            (67, ComplianceStatus.warning),
            (88, ComplianceStatus.warning),
            (89, ComplianceStatus.danger),
            (93, ComplianceStatus.danger),
            (94, ComplianceStatus.critical),
            (99, ComplianceStatus.critical),
            (100, ComplianceStatus.exceeded),
            (120, ComplianceStatus.exceeded),
        ],
    )
    def test_band_boundaries(self, used: int, expected: ComplianceStatus) -> None:
        assert status_for(used, 100) is expected

    @pytest.mark.parametrize("used, expected", [(66, "safe"), (67, "warning"), (94, "critical"), (100, "exceeded")])
    def test_boundaries_through_calculate(self, used: int, expected: str) -> None:
        rule = Rule("t", 100, 365)
        ref = date(2024, 12, 31)
        trips = [Trip(ref - timedelta(days=used - 1), ref, "t")]
        assert calculate(rule, trips, ref).status.value == expected
