"""Trip schemas."""
from datetime import date, datetime
from typing import Literal
from pydantic import BaseModel


class TripCreate(BaseModel):
    start_date: date
    end_date: date
    country: str | None = None
    category: Literal["personal", "business"] = "personal"
    notes: str | None = None
    jurisdiction_code: str | None = None  # None = primary zone
    family_member_id: int | None = None


class TripUpdate(BaseModel):
    start_date: date | None = None
    end_date: date | None = None
    country: str | None = None
    category: Literal["personal", "business"] | None = None
    notes: str | None = None
    jurisdiction_code: str | None = None


class TripResponse(BaseModel):
    id: int
    start_date: date
    end_date: date
    country: str | None
    category: str
    notes: str | None
    jurisdiction_code: str | None
    family_member_id: int | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class TripImportResult(BaseModel):
    imported: int
    skipped: int
    errors: list[str]
