"""Daily compliance snapshots for historical charting. One row per (user, member, jurisdiction, day)."""
from sqlalchemy import Column, Integer, String, Date, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from staywatch.database import Base


class ComplianceSnapshot(Base):
    __tablename__ = "compliance_snapshots"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "family_member_id", "jurisdiction_code", "snapshot_date",
            name="uq_snapshot_user_member_code_date",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    family_member_id = Column(Integer, ForeignKey("family_members.id", ondelete="CASCADE"), nullable=True)
    jurisdiction_code = Column(String(50), nullable=False)
    snapshot_date = Column(Date, nullable=False, index=True)

    days_used = Column(Integer, nullable=False)
    days_remaining = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False)
    trip_count = Column(Integer, nullable=False, default=0)
    window_start = Column(Date, nullable=False)
    window_end = Column(Date, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
