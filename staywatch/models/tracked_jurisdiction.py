"""Jurisdictions a user has chosen to track besides the primary zone."""
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from staywatch.database import Base


class TrackedJurisdiction(Base):
    __tablename__ = "tracked_jurisdictions"
    __table_args__ = (UniqueConstraint("user_id", "code", name="uq_tracked_user_code"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    code = Column(String(50), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
