from staywatch.schemas.jurisdiction import JurisdictionResponse, SummaryResponse, JurisdictionSummaryResponse
from staywatch.schemas.trip import TripCreate, TripUpdate, TripResponse, TripImportResult
from staywatch.schemas.simulation import SimulationRequest, SimulationResponse
from staywatch.schemas.family import FamilyMemberCreate, FamilyMemberUpdate, FamilyMemberResponse
from staywatch.schemas.analytics import SnapshotResponse
from staywatch.schemas.user import UserSettingsUpdate, UserSettingsResponse
