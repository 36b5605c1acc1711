"""What-if simulation schemas."""
from datetime import date
from pydantic import BaseModel
from staywatch.services.simulator import ReferencePolicy


class SimulationRequest(BaseModel):
    start_date: date
    end_date: date
    jurisdiction_code: str | None = None  # None = primary zone
    family_member_id: int | None = None
    reference_policy: ReferencePolicy = ReferencePolicy.each_day


class SimulationResponse(BaseModel):
    jurisdiction_code: str
    would_violate: bool
    violations: list[date]
    max_days_used: int
    days_over_limit: int
    proposed_length: int
    earliest_safe_date: date | None = None
    max_safe_length: int

    class Config:
        from_attributes = True
