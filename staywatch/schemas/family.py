"""Family member schemas."""
from pydantic import BaseModel
from staywatch.schemas.jurisdiction import SummaryResponse


class FamilyMemberCreate(BaseModel):
    name: str
    relationship_to_user: str | None = None
    nationality: str | None = None
    passport_country: str | None = None
    sort_order: int = 0


class FamilyMemberUpdate(BaseModel):
    name: str | None = None
    relationship_to_user: str | None = None
    nationality: str | None = None
    passport_country: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class FamilyMemberResponse(BaseModel):
    id: int
    name: str
    relationship_to_user: str | None
    nationality: str | None
    passport_country: str | None
    is_active: bool
    sort_order: int

    class Config:
        from_attributes = True


class MemberSummary(BaseModel):
    member: FamilyMemberResponse
    summary: SummaryResponse


class FamilySummariesResponse(BaseModel):
    primary: SummaryResponse
    family: list[MemberSummary]
