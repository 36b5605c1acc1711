"""Run the calculator across tracked jurisdictions, family members, and batches of independent jobs."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Dict, Hashable, Iterable, Mapping, NamedTuple, Optional, Sequence

from staywatch.services.compliance import Summary, Trip, calculate
from staywatch.services.rules import Rule

if TYPE_CHECKING:
    from staywatch.services.rule_registry import RuleRegistry

log = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class FamilySummary:
    primary: Summary
    members: Dict[Hashable, Summary] = field(default_factory=dict)


class SummaryJob(NamedTuple):
    """One independent (rule, trips) calculation in a batch."""

    key: Hashable
    rule: Rule
    trips: Sequence[Trip]
    reference_date: date
    primary_code: Optional[str] = None


def summarize_all(
    registry: RuleRegistry,
    tracked_codes: Iterable[str],
    trips: Sequence[Trip],
    reference_date: date,
    primary_code: str,
) -> Dict[str, Summary]:
    """Summary per tracked jurisdiction. Unknown codes are skipped; nothing tracked means the primary zone."""
    codes = list(dict.fromkeys(tracked_codes)) or [primary_code]
    summaries: Dict[str, Summary] = {}
    for code in codes:
        rule = registry.get(code)
        if rule is None:
            log.warning("Tracked jurisdiction %s has no active rule; skipped", code)
            continue
        summaries[code] = calculate(rule, trips, reference_date, primary_code)
    return summaries


def summarize_family(
    rule: Rule,
    primary_trips: Sequence[Trip],
    member_trips: Mapping[Hashable, Sequence[Trip]],
    reference_date: date,
    primary_code: Optional[str] = None,
) -> FamilySummary:
    """Primary traveler plus each member against the same rule. Members never share a day budget."""
    primary = calculate(rule, [t for t in primary_trips if t.owner is None], reference_date, primary_code)
    members = {
        member_id: calculate(rule, trips, reference_date, primary_code)
        for member_id, trips in member_trips.items()
    }
    return FamilySummary(primary=primary, members=members)


def summarize_batch(jobs: Iterable[SummaryJob], max_workers: int = 4) -> Dict[Hashable, Summary]:
    """Fan independent jobs out over a thread pool. Results are keyed by job key, in no particular order."""
    jobs = list(jobs)
    if not jobs:
        return {}
    if max_workers <= 1:
        return {job.key: calculate(job.rule, job.trips, job.reference_date, job.primary_code) for job in jobs}
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            job.key: pool.submit(calculate, job.rule, job.trips, job.reference_date, job.primary_code)
            for job in jobs
        }
        return {key: fut.result() for key, fut in futures.items()}
