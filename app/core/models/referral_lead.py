"""
Referral lead: one family referred by an ambassador.
Only Confirmed leads feed benefit computation.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class ReferralLead(Base):
    __tablename__ = "referral_leads"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ambassador_id = Column(
        UUID(as_uuid=True),
        ForeignKey("ambassadors.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    parent_name = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="New", index=True)  # New, Follow-up, Confirmed, Rejected
    student_id = Column(UUID(as_uuid=True), ForeignKey("admitted_students.id", ondelete="SET NULL"), nullable=True)
    admitted_academic_year = Column(String(20), nullable=True)
    selected_fee_type = Column(String(10), nullable=False, default="OTP")  # OTP | WOTP
    campus_id = Column(Integer, nullable=True)
    grade = Column(String(30), nullable=True)
    # Explicit fee basis; takes precedence over the campus fee table
    annual_fee = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)

    ambassador = relationship("Ambassador", back_populates="referrals")
    student = relationship("AdmittedStudent", lazy="joined")
