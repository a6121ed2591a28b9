"""Campus fee table: annual fee per campus, grade and academic year, one column per fee type."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class CampusFee(Base):
    __tablename__ = "campus_fees"
    __table_args__ = (
        UniqueConstraint("campus_id", "grade", "academic_year", name="uq_campus_fee_grade_year"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    campus_id = Column(Integer, nullable=False, index=True)
    grade = Column(String(30), nullable=False)
    academic_year = Column(String(20), nullable=False)
    otp_fee = Column(Numeric(12, 2), nullable=True)  # one-time payment
    wotp_fee = Column(Numeric(12, 2), nullable=True)  # without one-time payment
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
