"""Trip store: validation of incoming trips, conversion of stored rows to engine Trips, CSV import/export."""
from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from staywatch.exceptions import InvalidTripError
from staywatch.models.family_member import FamilyMember
from staywatch.models.trip import TripRecord
from staywatch.services.compliance import Trip
from staywatch.services.interval_math import count_inclusive_days

CSV_COLUMNS = ["start_date", "end_date", "country", "category", "notes", "jurisdiction_code"]
TRIP_CATEGORIES = ("personal", "business")


def validate_trip_dates(start: date, end: date, max_days: int = 90) -> int:
    """Return the trip length in days; raise InvalidTripError for reversed or over-long trips."""
    if end < start:
        raise InvalidTripError("End date must be on or after start date.")
    length = count_inclusive_days(start, end)
    if length > max_days:
        raise InvalidTripError(f"A single trip cannot exceed {max_days} days.")
    return length


def trip_from_record(record: TripRecord) -> Trip:
    return Trip(
        start_date=record.start_date,
        end_date=record.end_date,
        jurisdiction_code=(record.jurisdiction_code or "").strip().lower() or None,
        owner=record.family_member_id,
    )


def load_trips(db: Session, user_id: int, family_member_id: Optional[int] = None) -> List[Trip]:
    """Trips of the primary traveler (family_member_id None) or of one family member, oldest first."""
    q = db.query(TripRecord).filter(TripRecord.user_id == user_id)
    if family_member_id is None:
        q = q.filter(TripRecord.family_member_id.is_(None))
    else:
        q = q.filter(TripRecord.family_member_id == family_member_id)
    return [trip_from_record(r) for r in q.order_by(TripRecord.start_date.asc()).all()]


def load_member_trips(db: Session, user_id: int) -> Dict[int, List[Trip]]:
    """Trips keyed by active family member id (members without trips map to an empty list)."""
    members = (
        db.query(FamilyMember)
        .filter(FamilyMember.user_id == user_id, FamilyMember.is_active.is_(True))
        .order_by(FamilyMember.sort_order.asc(), FamilyMember.name.asc())
        .all()
    )
    out: Dict[int, List[Trip]] = {m.id: [] for m in members}
    rows = (
        db.query(TripRecord)
        .filter(TripRecord.user_id == user_id, TripRecord.family_member_id.in_(list(out.keys())))
        .order_by(TripRecord.start_date.asc())
        .all()
    ) if out else []
    for r in rows:
        out[r.family_member_id].append(trip_from_record(r))
    return out


def _parse_date(value: str) -> date:
    value = (value or "").strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise InvalidTripError(f"Invalid date format: {value!r}. Use YYYY-MM-DD.")


def parse_trips_csv(text: str, max_days: int = 90) -> Tuple[List[dict], List[str]]:
    """Parse CSV with a header row. Returns (valid rows, error messages); invalid rows are not returned."""
    reader = csv.DictReader(io.StringIO(text))
    rows: List[dict] = []
    errors: List[str] = []
    if not reader.fieldnames or not {"start_date", "end_date"} <= {f.strip() for f in reader.fieldnames}:
        return rows, ["CSV must have a header row with start_date and end_date columns."]
    # Header is line 1
    for line_no, raw in enumerate(reader, start=2):
        raw = {(k or "").strip(): (v or "").strip() for k, v in raw.items()}
        try:
            start = _parse_date(raw.get("start_date", ""))
            end = _parse_date(raw.get("end_date", ""))
            validate_trip_dates(start, end, max_days)
        except InvalidTripError as e:
            errors.append(f"Line {line_no}: {e}")
            continue
        category = raw.get("category", "").lower() or "personal"
        rows.append(
            {
                "start_date": start,
                "end_date": end,
                "country": raw.get("country") or None,
                "category": category if category in TRIP_CATEGORIES else "personal",
                "notes": raw.get("notes") or None,
                "jurisdiction_code": raw.get("jurisdiction_code", "").lower() or None,
            }
        )
    return rows, errors


def export_trips_csv(records: List[TripRecord]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_COLUMNS)
    for r in records:
        writer.writerow(
            [
                r.start_date.isoformat(),
                r.end_date.isoformat(),
                r.country or "",
                r.category or "",
                r.notes or "",
                r.jurisdiction_code or "",
            ]
        )
    return buf.getvalue()
