"""Compliance history (from daily snapshots) and the PDF compliance report."""
from datetime import date, datetime, timezone
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from staywatch.config import get_settings
from staywatch.database import get_db
from staywatch.dependencies import get_current_user, get_rule_registry, resolve_rule
from staywatch.models.trip import TripRecord
from staywatch.models.user import User
from staywatch.schemas.analytics import SnapshotResponse
from staywatch.services.aggregator import summarize_all
from staywatch.services.reports import build_compliance_report_pdf
from staywatch.services.rule_registry import RuleRegistry
from staywatch.services.snapshots import compliance_history, tracked_codes
from staywatch.services.trip_store import load_trips

router = APIRouter(tags=["analytics"])
settings = get_settings()


@router.get("/analytics/history", response_model=list[SnapshotResponse])
def history(
    code: str | None = Query(None, description="Jurisdiction code; primary zone when omitted"),
    days: int = Query(30, ge=1, le=366),
    family_member_id: int | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    rule = resolve_rule(code, registry)
    rows = compliance_history(db, current_user.id, rule.code, days=days, family_member_id=family_member_id)
    return [SnapshotResponse.model_validate(r) for r in rows]


@router.get("/reports/compliance.pdf")
def compliance_report(
    reference_date: date | None = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    """PDF with a summary per tracked jurisdiction and every recorded trip."""
    ref = reference_date or datetime.now(timezone.utc).date()
    primary = settings.primary_jurisdiction_code
    summaries = summarize_all(
        registry,
        tracked_codes(db, current_user.id, primary),
        load_trips(db, current_user.id),
        ref,
        primary,
    )
    trips = (
        db.query(TripRecord)
        .filter(TripRecord.user_id == current_user.id, TripRecord.family_member_id.is_(None))
        .order_by(TripRecord.start_date.asc())
        .all()
    )
    pdf = build_compliance_report_pdf(current_user.full_name or current_user.email, summaries, trips, ref)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="compliance-{ref.isoformat()}.pdf"'},
    )
