"""Append-only record of compliance alerts sent. Used to avoid repeating the same level too often."""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from staywatch.database import Base


class AlertLog(Base):
    __tablename__ = "alert_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    jurisdiction_code = Column(String(50), nullable=False)

    # warning | danger | urgent
    level = Column(String(20), nullable=False, index=True)
    days_used = Column(Integer, nullable=False)
    days_remaining = Column(Integer, nullable=False)
    delivered = Column(Integer, nullable=False, default=0)
    message = Column(Text, nullable=True)
    meta = Column(JSON, nullable=True)

    # UTC only - server_default
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
