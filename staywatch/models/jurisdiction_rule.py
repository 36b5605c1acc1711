"""Jurisdiction rules database (seeded defaults plus admin-added rules)."""
from sqlalchemy import Column, Integer, String, Boolean, Text, Enum as SQLEnum
from staywatch.database import Base
from staywatch.services.rules import CountingMethod, JurisdictionType


class JurisdictionRule(Base):
    __tablename__ = "jurisdiction_rules"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)  # schengen, uk_visitor, us_ny
    name = Column(String(255), nullable=False)
    type = Column(SQLEnum(JurisdictionType), nullable=False, default=JurisdictionType.zone)
    parent_code = Column(String(50), nullable=True)

    days_allowed = Column(Integer, nullable=False)
    window_days = Column(Integer, nullable=False, default=180)
    counting_method = Column(SQLEnum(CountingMethod), nullable=False, default=CountingMethod.rolling)
    # Year boundary for calendar_year / fiscal_year; NULL means 1 January
    reset_month = Column(Integer, nullable=True)
    reset_day = Column(Integer, nullable=True)

    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    is_system = Column(Boolean, default=False, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
