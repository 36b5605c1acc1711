"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table.
"""
from staywatch.models.user import User
from staywatch.models.family_member import FamilyMember
from staywatch.models.trip import TripRecord
from staywatch.models.jurisdiction_rule import JurisdictionRule
from staywatch.models.tracked_jurisdiction import TrackedJurisdiction
from staywatch.models.compliance_snapshot import ComplianceSnapshot
from staywatch.models.alert_log import AlertLog

__all__ = [
    "User",
    "FamilyMember",
    "TripRecord",
    "JurisdictionRule",
    "TrackedJurisdiction",
    "ComplianceSnapshot",
    "AlertLog",
]
