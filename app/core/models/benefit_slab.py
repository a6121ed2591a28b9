"""
Benefit slab: admin override of the confirmation-time tier table, one row per referral count (1-5).
Counts without a row fall back to the built-in defaults.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class BenefitSlab(Base):
    __tablename__ = "benefit_slabs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tier_name = Column(String(50), nullable=True)
    referral_count = Column(Integer, nullable=False, unique=True)
    year_fee_benefit_percent = Column(Numeric(5, 2), nullable=False)
    long_term_extra_percent = Column(Numeric(5, 2), nullable=False, default=0)
    base_long_term_percent = Column(Numeric(5, 2), nullable=False, default=0)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
