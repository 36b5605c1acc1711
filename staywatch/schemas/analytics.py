"""Compliance history schemas."""
from datetime import date
from pydantic import BaseModel


class SnapshotResponse(BaseModel):
    snapshot_date: date
    jurisdiction_code: str
    family_member_id: int | None
    days_used: int
    days_remaining: int
    status: str
    trip_count: int
    window_start: date
    window_end: date

    class Config:
        from_attributes = True
