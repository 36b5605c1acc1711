"""Daily analytics snapshots: persist each user's summaries so compliance can be charted over time."""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from staywatch.config import get_settings
from staywatch.database import SessionLocal
from staywatch.models.compliance_snapshot import ComplianceSnapshot
from staywatch.models.tracked_jurisdiction import TrackedJurisdiction
from staywatch.models.trip import TripRecord
from staywatch.services.aggregator import SummaryJob, summarize_batch
from staywatch.services.compliance import Summary
from staywatch.services.rule_registry import RuleRegistry, db_rule_loader
from staywatch.services.trip_store import load_member_trips, load_trips

log = logging.getLogger("uvicorn.error")


def tracked_codes(db: Session, user_id: int, primary_code: str) -> List[str]:
    """Primary zone first, then the user's other tracked jurisdictions in the order they were added."""
    rows = (
        db.query(TrackedJurisdiction)
        .filter(TrackedJurisdiction.user_id == user_id)
        .order_by(TrackedJurisdiction.id.asc())
        .all()
    )
    return list(dict.fromkeys([primary_code] + [r.code for r in rows]))


def _upsert(db: Session, user_id: int, member_id: Optional[int], s: Summary, snapshot_date: date) -> None:
    row = (
        db.query(ComplianceSnapshot)
        .filter(
            ComplianceSnapshot.user_id == user_id,
            ComplianceSnapshot.family_member_id.is_(None) if member_id is None
            else ComplianceSnapshot.family_member_id == member_id,
            ComplianceSnapshot.jurisdiction_code == s.jurisdiction_code,
            ComplianceSnapshot.snapshot_date == snapshot_date,
        )
        .first()
    )
    if row is None:
        row = ComplianceSnapshot(
            user_id=user_id,
            family_member_id=member_id,
            jurisdiction_code=s.jurisdiction_code,
            snapshot_date=snapshot_date,
        )
        db.add(row)
    row.days_used = s.days_used
    row.days_remaining = s.days_remaining
    row.status = s.status.value
    row.trip_count = s.trip_count
    row.window_start = s.window_start
    row.window_end = s.window_end


def record_daily_snapshot(
    db: Session,
    registry: RuleRegistry,
    today: Optional[date] = None,
    max_workers: Optional[int] = None,
) -> int:
    """Snapshot every user with trips: all tracked jurisdictions for the user, the primary one for members.

    Returns the number of snapshot rows written. Re-running on the same day overwrites that day's rows.
    """
    settings = get_settings()
    today = today or datetime.now(timezone.utc).date()
    primary = settings.primary_jurisdiction_code
    workers = max_workers if max_workers is not None else settings.snapshot_workers

    jobs: List[SummaryJob] = []
    user_ids = [uid for (uid,) in db.query(TripRecord.user_id).distinct().all()]
    for user_id in user_ids:
        trips = load_trips(db, user_id)
        for code in tracked_codes(db, user_id, primary):
            rule = registry.get(code)
            if rule is None:
                log.warning("Snapshot: user %s tracks unknown jurisdiction %s", user_id, code)
                continue
            jobs.append(SummaryJob((user_id, None, code), rule, trips, today, primary))
        primary_rule = registry.get(primary)
        if primary_rule is None:
            continue
        for member_id, member_trips in load_member_trips(db, user_id).items():
            jobs.append(SummaryJob((user_id, member_id, primary), primary_rule, member_trips, today, primary))

    results = summarize_batch(jobs, max_workers=workers)
    for (user_id, member_id, _code), summary in results.items():
        _upsert(db, user_id, member_id, summary, today)
    db.commit()
    log.info("Compliance snapshot %s: %d user(s), %d row(s)", today.isoformat(), len(user_ids), len(results))
    return len(results)


def compliance_history(
    db: Session,
    user_id: int,
    code: str,
    days: int = 30,
    family_member_id: Optional[int] = None,
    today: Optional[date] = None,
) -> List[ComplianceSnapshot]:
    """Snapshots for the last `days` days, oldest first."""
    today = today or datetime.now(timezone.utc).date()
    since = today - timedelta(days=days - 1)
    q = db.query(ComplianceSnapshot).filter(
        ComplianceSnapshot.user_id == user_id,
        ComplianceSnapshot.jurisdiction_code == code,
        ComplianceSnapshot.snapshot_date >= since,
        ComplianceSnapshot.snapshot_date <= today,
    )
    if family_member_id is None:
        q = q.filter(ComplianceSnapshot.family_member_id.is_(None))
    else:
        q = q.filter(ComplianceSnapshot.family_member_id == family_member_id)
    return q.order_by(ComplianceSnapshot.snapshot_date.asc()).all()


def run_snapshot_job() -> None:
    """Scheduler entry point: own session, registry loaded from the database."""
    db = SessionLocal()
    try:
        record_daily_snapshot(db, RuleRegistry(db_rule_loader(SessionLocal)))
    finally:
        db.close()
