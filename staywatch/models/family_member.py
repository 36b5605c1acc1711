"""Family members tracked alongside the primary traveler. Each has an independent day budget."""
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from staywatch.database import Base


class FamilyMember(Base):
    __tablename__ = "family_members"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    relationship_to_user = Column(String(50), nullable=True)  # spouse, child, parent, ...
    nationality = Column(String(100), nullable=True)
    passport_country = Column(String(100), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="family_members")
    trips = relationship("TripRecord", back_populates="family_member", cascade="all, delete-orphan")
