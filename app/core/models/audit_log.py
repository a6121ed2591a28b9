"""
Audit log for ledger and referral state changes. Append-only.
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    kind = Column(String(30), nullable=False)  # CREATE, UPDATE, DELETE
    subject = Column(String(50), nullable=False)  # settlement, finance, referral, benefit_slab
    description = Column(Text, nullable=False)
    ref_id = Column(String(64), nullable=True, index=True)
    performed_by = Column(UUID(as_uuid=True), nullable=True)
    performed_by_role = Column(String(50), nullable=True)
    extra = Column("metadata", JSON, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
