"""Stored trips. The compliance engine only ever sees them as read-only Trip values."""
from sqlalchemy import Column, Integer, String, Date, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from staywatch.database import Base


class TripRecord(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # NULL = the primary traveler's own trip
    family_member_id = Column(Integer, ForeignKey("family_members.id", ondelete="CASCADE"), nullable=True, index=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    country = Column(String(100), nullable=True)
    category = Column(String(20), nullable=False, default="personal")  # personal | business
    notes = Column(Text, nullable=True)

    # NULL / '' = legacy rows, counted against the primary jurisdiction
    jurisdiction_code = Column(String(50), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="trips")
    family_member = relationship("FamilyMember", back_populates="trips")
