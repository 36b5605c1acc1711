"""Jurisdiction rule and compliance summary schemas."""
from datetime import date
from pydantic import BaseModel
from staywatch.services.compliance import ComplianceStatus
from staywatch.services.rules import CountingMethod, JurisdictionType


class JurisdictionResponse(BaseModel):
    code: str
    name: str
    type: JurisdictionType
    days_allowed: int
    window_days: int
    counting_method: CountingMethod
    reset_month: int
    reset_day: int
    description: str | None = None

    class Config:
        from_attributes = True


class SummaryResponse(BaseModel):
    jurisdiction_code: str
    days_used: int
    days_allowed: int
    days_remaining: int
    percentage: float
    status: ComplianceStatus
    window_start: date
    window_end: date
    reference_date: date
    counting_method: CountingMethod
    next_expiring_date: date | None = None
    next_expiring_count: int = 0
    trip_count: int = 0

    class Config:
        from_attributes = True


class JurisdictionSummaryResponse(SummaryResponse):
    """Summary with the rule it was computed from (multi-jurisdiction view)."""
    rule: JurisdictionResponse


class TrackedAdd(BaseModel):
    code: str


class TrackedResponse(BaseModel):
    tracked: list[str]
