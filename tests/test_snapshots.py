"""Tests for daily compliance snapshots, history, seeding and the PDF report."""
from datetime import date

import pytest

from factories import add_trip
from staywatch.exceptions import ConfigurationError
from staywatch.models import ComplianceSnapshot, JurisdictionRule, TrackedJurisdiction, TripRecord
from staywatch.seed import init_rules, seed_jurisdiction_rules
from staywatch.services.aggregator import summarize_all
from staywatch.services.reports import build_compliance_report_pdf
from staywatch.services.rule_registry import RuleRegistry, db_rule_loader
from staywatch.services.rules import DEFAULT_RULES, CountingMethod
from staywatch.services.snapshots import compliance_history, record_daily_snapshot, tracked_codes
from staywatch.services.trip_store import load_trips

TODAY = date(2024, 6, 1)


def test_seed_is_idempotent(db) -> None:
    assert db.query(JurisdictionRule).count() == len(DEFAULT_RULES)
    assert seed_jurisdiction_rules(db) == 0
    assert db.query(JurisdictionRule).count() == len(DEFAULT_RULES)


def test_init_rules_seeds_nothing_new_and_loads_registry(session_factory) -> None:
    registry = RuleRegistry(db_rule_loader(session_factory))
    assert init_rules(session_factory, registry) == 0
    assert registry.get("schengen").days_allowed == 90


def test_init_rules_fails_on_bad_rule_row(db, session_factory) -> None:
    db.add(
        JurisdictionRule(
            code="broken_year",
            name="Broken year rule",
            days_allowed=183,
            window_days=365,
            counting_method=CountingMethod.calendar_year,
            reset_month=0,
        )
    )
    db.commit()
    with pytest.raises(ConfigurationError):
        init_rules(session_factory, RuleRegistry(db_rule_loader(session_factory)))


def test_db_loader_reads_seeded_rules(session_factory) -> None:
    registry = RuleRegistry(db_rule_loader(session_factory))
    assert registry.get("uk_tax_year").reset_month == 4
    assert registry.get("us_ny").reset_month == 1
    assert [r.code for r in registry.all()][0] == "schengen"


def test_tracked_codes_start_with_primary(db, user) -> None:
    db.add(TrackedJurisdiction(user_id=user.id, code="us_ny"))
    db.add(TrackedJurisdiction(user_id=user.id, code="schengen"))
    db.commit()
    assert tracked_codes(db, user.id, "schengen") == ["schengen", "us_ny"]


class TestDailySnapshot:
    def _setup(self, db, user, member) -> None:
        add_trip(db, user.id, date(2024, 1, 1), date(2024, 1, 30))
        add_trip(db, user.id, date(2024, 3, 1), date(2024, 3, 31))
        add_trip(db, user.id, date(2024, 2, 1), date(2024, 2, 20), code="us_ny")
        add_trip(db, user.id, date(2024, 5, 1), date(2024, 5, 10), member_id=member.id)
        db.add(TrackedJurisdiction(user_id=user.id, code="us_ny"))
        db.commit()

    def test_rows_for_user_codes_and_members(self, db, user, member, registry) -> None:
        self._setup(db, user, member)
        written = record_daily_snapshot(db, registry, today=TODAY, max_workers=2)

        assert written == 3
        rows = {(r.family_member_id, r.jurisdiction_code): r for r in db.query(ComplianceSnapshot).all()}
        assert rows[(None, "schengen")].days_used == 61
        assert rows[(None, "us_ny")].days_used == 20
        assert rows[(member.id, "schengen")].days_used == 10
        assert rows[(None, "schengen")].status == "warning"

    def test_rerun_same_day_overwrites(self, db, user, member, registry) -> None:
        self._setup(db, user, member)
        record_daily_snapshot(db, registry, today=TODAY, max_workers=1)
        add_trip(db, user.id, date(2024, 5, 20), date(2024, 5, 24))
        record_daily_snapshot(db, registry, today=TODAY, max_workers=1)

        assert db.query(ComplianceSnapshot).count() == 3
        history = compliance_history(db, user.id, "schengen", days=30, today=TODAY)
        assert len(history) == 1
        assert history[0].days_used == 66

    def test_history_oldest_first_and_per_member(self, db, user, member, registry) -> None:
        self._setup(db, user, member)
        record_daily_snapshot(db, registry, today=date(2024, 5, 31), max_workers=1)
        record_daily_snapshot(db, registry, today=TODAY, max_workers=1)

        history = compliance_history(db, user.id, "schengen", days=30, today=TODAY)
        assert [h.snapshot_date for h in history] == [date(2024, 5, 31), TODAY]
        member_history = compliance_history(db, user.id, "schengen", days=1, family_member_id=member.id, today=TODAY)
        assert [h.days_used for h in member_history] == [10]


def test_pdf_report(db, user, registry) -> None:
    add_trip(db, user.id, date(2024, 1, 1), date(2024, 1, 30), country="France & <Belgium>")
    summaries = summarize_all(registry, ["schengen"], load_trips(db, user.id), TODAY, "schengen")
    trips = db.query(TripRecord).filter(TripRecord.user_id == user.id).all()

    pdf = build_compliance_report_pdf("Test Traveler", summaries, trips, TODAY)
    assert pdf.startswith(b"%PDF")


def test_pdf_report_without_trips(registry) -> None:
    summaries = summarize_all(registry, [], [], TODAY, "schengen")
    assert build_compliance_report_pdf("Nobody", summaries, [], TODAY).startswith(b"%PDF")
