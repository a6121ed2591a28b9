"""
Referral ambassador: a parent, staff member, alumnus or other person who refers families.
confirmed_referral_count is a display cache; payout figures always re-derive it from referral_leads.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class Ambassador(Base):
    __tablename__ = "ambassadors"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # Parent, Staff, Alumni, Other
    # Only meaningful for Staff: decides fee discount vs cash commission
    child_enrolled_at_school = Column(Boolean, nullable=False, default=False)
    base_student_fee = Column(Numeric(12, 2), nullable=True)
    confirmed_referral_count = Column(Integer, nullable=False, default=0)
    is_elite_last_year = Column(Boolean, nullable=False, default=False)
    # Year label in which the ambassador reached the top tier; feeds next year's elite flag
    elite_qualified_year = Column(String(20), nullable=True)
    benefit_status = Column(String(20), nullable=False, default="Inactive")  # Active | Inactive
    provisional_benefit_percent = Column(Numeric(5, 2), nullable=False, default=0)
    long_term_benefit_percent = Column(Numeric(5, 2), nullable=False, default=0)
    is_archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    referrals = relationship("ReferralLead", back_populates="ambassador")
    settlements = relationship("Settlement", back_populates="ambassador")
