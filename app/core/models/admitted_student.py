"""Student admitted through a referral. Owned by the student registry; read here for year and fee data."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class AdmittedStudent(Base):
    __tablename__ = "admitted_students"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False)
    campus_id = Column(Integer, nullable=True)
    grade = Column(String(30), nullable=True)
    academic_year = Column(String(20), nullable=True)  # e.g. "2025-2026"
    annual_fee = Column(Numeric(12, 2), nullable=True)
    base_fee = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
