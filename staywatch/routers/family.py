"""Family members: each one has their own trips and their own day budget."""
from datetime import date, datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from staywatch.config import get_settings
from staywatch.database import get_db
from staywatch.dependencies import get_current_user, get_rule_registry, resolve_rule
from staywatch.models.family_member import FamilyMember
from staywatch.models.user import User
from staywatch.schemas.family import (
    FamilyMemberCreate,
    FamilyMemberResponse,
    FamilyMemberUpdate,
    FamilySummariesResponse,
    MemberSummary,
)
from staywatch.schemas.jurisdiction import SummaryResponse
from staywatch.services.aggregator import summarize_family
from staywatch.services.compliance import calculate
from staywatch.services.rule_registry import RuleRegistry
from staywatch.services.trip_store import load_member_trips, load_trips

router = APIRouter(prefix="/family", tags=["family"])
settings = get_settings()


def _get_member(db: Session, member_id: int, user: User) -> FamilyMember:
    member = db.query(FamilyMember).filter(
        FamilyMember.id == member_id,
        FamilyMember.user_id == user.id,
    ).first()
    if not member:
        raise HTTPException(status_code=404, detail="Family member not found")
    return member


@router.get("/", response_model=list[FamilyMemberResponse])
def list_members(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    members = (
        db.query(FamilyMember)
        .filter(FamilyMember.user_id == current_user.id)
        .order_by(FamilyMember.sort_order.asc(), FamilyMember.name.asc())
        .all()
    )
    return [FamilyMemberResponse.model_validate(m) for m in members]


@router.post("/", response_model=FamilyMemberResponse, status_code=201)
def add_member(
    data: FamilyMemberCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    member = FamilyMember(
        user_id=current_user.id,
        name=name,
        relationship_to_user=data.relationship_to_user,
        nationality=data.nationality,
        passport_country=data.passport_country,
        sort_order=data.sort_order,
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    return FamilyMemberResponse.model_validate(member)


@router.get("/summaries", response_model=FamilySummariesResponse)
def family_summaries(
    code: str | None = Query(None, description="Jurisdiction code; primary zone when omitted"),
    reference_date: date | None = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    """Your summary plus one per active family member, same jurisdiction."""
    rule = resolve_rule(code, registry)
    ref = reference_date or datetime.now(timezone.utc).date()
    member_trips = load_member_trips(db, current_user.id)
    result = summarize_family(
        rule,
        load_trips(db, current_user.id),
        member_trips,
        ref,
        settings.primary_jurisdiction_code,
    )
    members = {
        m.id: m
        for m in db.query(FamilyMember).filter(FamilyMember.id.in_(list(member_trips.keys()))).all()
    } if member_trips else {}
    return FamilySummariesResponse(
        primary=SummaryResponse.model_validate(result.primary),
        family=[
            MemberSummary(
                member=FamilyMemberResponse.model_validate(members[member_id]),
                summary=SummaryResponse.model_validate(summary),
            )
            for member_id, summary in result.members.items()
        ],
    )


@router.get("/{member_id}", response_model=FamilyMemberResponse)
def get_member(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return FamilyMemberResponse.model_validate(_get_member(db, member_id, current_user))


@router.put("/{member_id}", response_model=FamilyMemberResponse)
def update_member(
    member_id: int,
    data: FamilyMemberUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    member = _get_member(db, member_id, current_user)
    changes = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k not in ("sort_order", "is_active")
    }
    if "name" in changes:
        changes["name"] = (changes["name"] or "").strip()
        if not changes["name"]:
            raise HTTPException(status_code=400, detail="Name is required")
    for field, value in changes.items():
        setattr(member, field, value)
    db.commit()
    db.refresh(member)
    return FamilyMemberResponse.model_validate(member)


@router.delete("/{member_id}", status_code=204)
def delete_member(
    member_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Removes the member and their trips."""
    member = _get_member(db, member_id, current_user)
    db.delete(member)
    db.commit()
    return Response(status_code=204)


@router.get("/{member_id}/summary", response_model=SummaryResponse)
def member_summary(
    member_id: int,
    code: str | None = Query(None),
    reference_date: date | None = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    member = _get_member(db, member_id, current_user)
    rule = resolve_rule(code, registry)
    ref = reference_date or datetime.now(timezone.utc).date()
    trips = load_trips(db, current_user.id, member.id)
    return SummaryResponse.model_validate(calculate(rule, trips, ref, settings.primary_jurisdiction_code))
