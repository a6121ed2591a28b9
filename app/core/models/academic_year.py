import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, String
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class AcademicYear(Base):
    """
    Academic year boundaries, e.g. "2025-2026" from June to May.
    Used as the date fallback when a referral carries no admitted-year metadata.
    """

    __tablename__ = "academic_years"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(20), nullable=False, unique=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_current = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
