"""Tests for multi-jurisdiction, family and batch summaries."""
from datetime import date

from factories import schengen_trips
from staywatch.services.aggregator import SummaryJob, summarize_all, summarize_batch, summarize_family
from staywatch.services.compliance import Trip, calculate
from staywatch.services.rule_registry import RuleRegistry
from staywatch.services.rules import Rule

REF = date(2024, 6, 1)


class TestSummarizeAll:
    def test_one_summary_per_known_code(self, registry: RuleRegistry) -> None:
        trips = schengen_trips() + [Trip(date(2024, 2, 1), date(2024, 2, 20), "us_ny")]
        summaries = summarize_all(registry, ["schengen", "us_ny", "nowhere", "schengen"], trips, REF, "schengen")

        assert list(summaries.keys()) == ["schengen", "us_ny"]
        assert summaries["schengen"].days_used == 61
        assert summaries["us_ny"].days_used == 20

    def test_nothing_tracked_means_primary(self, registry: RuleRegistry) -> None:
        summaries = summarize_all(registry, [], schengen_trips(), REF, "schengen")
        assert list(summaries.keys()) == ["schengen"]


def test_family_members_have_independent_budgets(schengen: Rule) -> None:
    primary = schengen_trips()
    members = {
        7: [Trip(date(2024, 5, 1), date(2024, 5, 10), owner=7)],
        8: [],
    }
    result = summarize_family(schengen, primary, members, REF, "schengen")

    assert result.primary.days_used == 61
    assert result.members[7].days_used == 10
    assert result.members[8].days_used == 0


def test_family_primary_ignores_member_owned_trips(schengen: Rule) -> None:
    mixed = schengen_trips() + [Trip(date(2024, 5, 1), date(2024, 5, 10), "schengen", owner=7)]
    result = summarize_family(schengen, mixed, {}, REF, "schengen")
    assert result.primary.days_used == 61
    assert result.members == {}


class TestSummarizeBatch:
    def _jobs(self, schengen: Rule, us_ny: Rule) -> list[SummaryJob]:
        trips = schengen_trips() + [Trip(date(2024, 2, 1), date(2024, 2, 20), "us_ny")]
        return [
            SummaryJob(("a", "schengen"), schengen, trips, REF, "schengen"),
            SummaryJob(("a", "us_ny"), us_ny, trips, REF, "schengen"),
            SummaryJob(("b", "schengen"), schengen, [], REF, "schengen"),
        ]

    def test_threaded_matches_sequential(self, schengen: Rule, us_ny: Rule) -> None:
        jobs = self._jobs(schengen, us_ny)
        assert summarize_batch(jobs, max_workers=4) == summarize_batch(jobs, max_workers=1)

    def test_results_keyed_by_job(self, schengen: Rule, us_ny: Rule) -> None:
        jobs = self._jobs(schengen, us_ny)
        results = summarize_batch(jobs, max_workers=2)
        for job in jobs:
            assert results[job.key] == calculate(job.rule, job.trips, job.reference_date, job.primary_code)

    def test_empty(self) -> None:
        assert summarize_batch([]) == {}
