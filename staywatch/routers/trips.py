"""Trip storage: CRUD plus CSV import/export. Every write is validated before the engine ever sees it."""
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session
from staywatch.config import get_settings
from staywatch.database import get_db
from staywatch.dependencies import get_current_user, get_rule_registry
from staywatch.exceptions import InvalidTripError
from staywatch.models.family_member import FamilyMember
from staywatch.models.trip import TripRecord
from staywatch.models.user import User
from staywatch.schemas.trip import TripCreate, TripImportResult, TripResponse, TripUpdate
from staywatch.services.rule_registry import RuleRegistry
from staywatch.services.trip_store import export_trips_csv, parse_trips_csv, validate_trip_dates

router = APIRouter(prefix="/trips", tags=["trips"])
settings = get_settings()
_REQUIRED_TRIP_FIELDS = ("start_date", "end_date", "category")


def _get_own_trip(db: Session, trip_id: int, user: User) -> TripRecord:
    trip = db.query(TripRecord).filter(TripRecord.id == trip_id).first()
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")
    if trip.user_id != user.id:
        raise HTTPException(status_code=403, detail="Not your trip")
    return trip


def _check_member(db: Session, member_id: int | None, user: User) -> None:
    if member_id is None:
        return
    member = db.query(FamilyMember).filter(FamilyMember.id == member_id, FamilyMember.user_id == user.id).first()
    if not member:
        raise HTTPException(status_code=404, detail="Family member not found")


def _normalize_code(code: str | None, registry: RuleRegistry) -> str | None:
    code = (code or "").strip().lower() or None
    if code and code not in registry:
        raise HTTPException(status_code=400, detail=f"Unknown jurisdiction: {code}")
    return code


@router.get("/", response_model=list[TripResponse])
def list_trips(
    family_member_id: int | None = Query(None, description="Trips of one family member instead of your own"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = db.query(TripRecord).filter(TripRecord.user_id == current_user.id)
    if family_member_id is None:
        q = q.filter(TripRecord.family_member_id.is_(None))
    else:
        q = q.filter(TripRecord.family_member_id == family_member_id)
    return [TripResponse.model_validate(t) for t in q.order_by(TripRecord.start_date.desc()).all()]


@router.post("/", response_model=TripResponse, status_code=201)
def create_trip(
    data: TripCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    try:
        validate_trip_dates(data.start_date, data.end_date, settings.max_trip_days)
    except InvalidTripError as e:
        raise HTTPException(status_code=400, detail=str(e))
    _check_member(db, data.family_member_id, current_user)
    trip = TripRecord(
        user_id=current_user.id,
        family_member_id=data.family_member_id,
        start_date=data.start_date,
        end_date=data.end_date,
        country=data.country,
        category=data.category,
        notes=data.notes,
        jurisdiction_code=_normalize_code(data.jurisdiction_code, registry),
    )
    db.add(trip)
    db.commit()
    db.refresh(trip)
    return TripResponse.model_validate(trip)


@router.get("/export")
def export_trips(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    trips = (
        db.query(TripRecord)
        .filter(TripRecord.user_id == current_user.id, TripRecord.family_member_id.is_(None))
        .order_by(TripRecord.start_date.asc())
        .all()
    )
    return Response(
        content=export_trips_csv(trips),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="trips.csv"'},
    )


@router.post("/import", response_model=TripImportResult)
def import_trips(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    """Upload trips via CSV. Columns: start_date, end_date (required), country, category, notes, jurisdiction_code. Invalid rows are skipped and reported."""
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Please upload a CSV file.")
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="File is empty.")
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded.")

    rows, errors = parse_trips_csv(text, settings.max_trip_days)
    imported = 0
    for row in rows:
        code = row["jurisdiction_code"]
        if code and code not in registry:
            errors.append(f"Unknown jurisdiction {code} for trip {row['start_date']}-{row['end_date']}")
            continue
        db.add(TripRecord(user_id=current_user.id, **row))
        imported += 1
    db.commit()
    return TripImportResult(imported=imported, skipped=len(errors), errors=errors)


@router.get("/{trip_id}", response_model=TripResponse)
def get_trip(
    trip_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return TripResponse.model_validate(_get_own_trip(db, trip_id, current_user))


@router.put("/{trip_id}", response_model=TripResponse)
def update_trip(
    trip_id: int,
    data: TripUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: RuleRegistry = Depends(get_rule_registry),
):
    trip = _get_own_trip(db, trip_id, current_user)
    # null on a required column means "leave unchanged"
    changes = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k not in _REQUIRED_TRIP_FIELDS
    }
    start = changes.get("start_date", trip.start_date)
    end = changes.get("end_date", trip.end_date)
    try:
        validate_trip_dates(start, end, settings.max_trip_days)
    except InvalidTripError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if "jurisdiction_code" in changes:
        changes["jurisdiction_code"] = _normalize_code(changes["jurisdiction_code"], registry)
    for field, value in changes.items():
        setattr(trip, field, value)
    db.commit()
    db.refresh(trip)
    return TripResponse.model_validate(trip)


@router.delete("/{trip_id}", status_code=204)
def delete_trip(
    trip_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    trip = _get_own_trip(db, trip_id, current_user)
    db.delete(trip)
    db.commit()
    return Response(status_code=204)
