"""What-if: check a proposed trip against existing trips without saving it."""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from staywatch.config import get_settings
from staywatch.database import get_db
from staywatch.dependencies import get_current_user, get_rule_registry, resolve_rule
from staywatch.exceptions import InvalidTripError
from staywatch.models.family_member import FamilyMember
from staywatch.models.user import User
from staywatch.schemas.simulation import SimulationRequest, SimulationResponse
from staywatch.services.rule_registry import RuleRegistry
from staywatch.services.simulator import simulate
from staywatch.services.trip_store import load_trips, validate_trip_dates

router = APIRouter(tags=["simulation"])
settings = get_settings()


@router.post("/simulate", response_model=SimulationResponse)
def simulate_trip(
    data: SimulationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    try:
        validate_trip_dates(data.start_date, data.end_date, settings.max_trip_days)
    except InvalidTripError as e:
        raise HTTPException(status_code=400, detail=str(e))
    rule = resolve_rule(data.jurisdiction_code, registry)
    if data.family_member_id is not None:
        member = db.query(FamilyMember).filter(
            FamilyMember.id == data.family_member_id,
            FamilyMember.user_id == current_user.id,
        ).first()
        if not member:
            raise HTTPException(status_code=404, detail="Family member not found")
    trips = load_trips(db, current_user.id, data.family_member_id)
    result = simulate(
        rule,
        trips,
        data.start_date,
        data.end_date,
        data.reference_policy,
        today=datetime.now(timezone.utc).date(),
        horizon_days=settings.simulation_horizon_days,
        primary_code=settings.primary_jurisdiction_code,
    )
    return SimulationResponse(
        jurisdiction_code=rule.code,
        would_violate=result.would_violate,
        violations=list(result.violations),
        max_days_used=result.max_days_used,
        days_over_limit=result.days_over_limit,
        proposed_length=result.proposed_length,
        earliest_safe_date=result.earliest_safe_date,
        max_safe_length=result.max_safe_length,
    )
