"""Jurisdiction rules (read-only, pre-seeded), tracked jurisdictions and compliance summaries."""
from datetime import date, datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from staywatch.config import get_settings
from staywatch.database import get_db
from staywatch.dependencies import get_current_user, get_rule_registry, resolve_rule
from staywatch.models.tracked_jurisdiction import TrackedJurisdiction
from staywatch.models.user import User
from staywatch.schemas.jurisdiction import (
    JurisdictionResponse,
    JurisdictionSummaryResponse,
    SummaryResponse,
    TrackedAdd,
    TrackedResponse,
)
from staywatch.services.aggregator import summarize_all
from staywatch.services.compliance import calculate
from staywatch.services.rule_registry import RuleRegistry
from staywatch.services.rules import JurisdictionType
from staywatch.services.snapshots import tracked_codes
from staywatch.services.trip_store import load_trips

router = APIRouter(prefix="/jurisdictions", tags=["jurisdictions"])
settings = get_settings()


@router.get("/", response_model=list[JurisdictionResponse])
def list_jurisdictions(
    type: JurisdictionType | None = Query(None, description="Filter by zone, country or state"),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    return [JurisdictionResponse.model_validate(r) for r in registry.all(type)]


@router.get("/tracked", response_model=list[JurisdictionResponse])
def get_tracked(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    codes = tracked_codes(db, current_user.id, settings.primary_jurisdiction_code)
    return [JurisdictionResponse.model_validate(r) for r in (registry.get(c) for c in codes) if r]


@router.post("/tracked", response_model=TrackedResponse)
def add_tracked(
    data: TrackedAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    rule = resolve_rule(data.code, registry)
    codes = tracked_codes(db, current_user.id, settings.primary_jurisdiction_code)
    if rule.code not in codes:
        db.add(TrackedJurisdiction(user_id=current_user.id, code=rule.code))
        db.commit()
        codes.append(rule.code)
    return TrackedResponse(tracked=codes)


@router.delete("/tracked/{code}", response_model=TrackedResponse)
def remove_tracked(
    code: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    code = code.strip().lower()
    if code == settings.primary_jurisdiction_code:
        raise HTTPException(status_code=400, detail=f"Cannot remove {code} from tracking.")
    db.query(TrackedJurisdiction).filter(
        TrackedJurisdiction.user_id == current_user.id,
        TrackedJurisdiction.code == code,
    ).delete()
    db.commit()
    return TrackedResponse(tracked=tracked_codes(db, current_user.id, settings.primary_jurisdiction_code))


@router.get("/summary", response_model=dict[str, JurisdictionSummaryResponse])
def multi_jurisdiction_summary(
    reference_date: date | None = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    """Summary for every tracked jurisdiction as of date (default today, UTC)."""
    ref = reference_date or datetime.now(timezone.utc).date()
    primary = settings.primary_jurisdiction_code
    summaries = summarize_all(
        registry,
        tracked_codes(db, current_user.id, primary),
        load_trips(db, current_user.id),
        ref,
        primary,
    )
    return {
        code: JurisdictionSummaryResponse(
            **SummaryResponse.model_validate(s).model_dump(),
            rule=JurisdictionResponse.model_validate(registry.get(code)),
        )
        for code, s in summaries.items()
    }


@router.get("/{code}", response_model=JurisdictionResponse)
def get_jurisdiction(code: str, registry: RuleRegistry = Depends(get_rule_registry)):
    return JurisdictionResponse.model_validate(resolve_rule(code, registry))


@router.get("/{code}/summary", response_model=SummaryResponse)
def jurisdiction_summary(
    code: str,
    reference_date: date | None = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    rule = resolve_rule(code, registry)
    ref = reference_date or datetime.now(timezone.utc).date()
    summary = calculate(rule, load_trips(db, current_user.id), ref, settings.primary_jurisdiction_code)
    return SummaryResponse.model_validate(summary)
