"""Settlement: ledger row for an amount owed to an ambassador. Immutable once Processed."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class Settlement(Base):
    """Amount is a snapshot of the pending balance at creation time and is never re-derived."""

    __tablename__ = "settlements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ambassador_id = Column(
        UUID(as_uuid=True),
        ForeignKey("ambassadors.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default="Pending", index=True)  # Pending | Processed
    bank_reference = Column(String(100), nullable=True)
    remarks = Column(Text, nullable=True)
    processed_by = Column(UUID(as_uuid=True), nullable=True)
    payout_date = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    ambassador = relationship("Ambassador", back_populates="settlements")
