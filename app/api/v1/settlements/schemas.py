"""Settlement ledger schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import SettlementStatus


class PendingSettlementResponse(BaseModel):
    ambassador_id: UUID
    pending: Decimal
    total_earned: Decimal
    total_settled: Decimal
    # Tier percent of the current academic year
    benefit_percent: Decimal
    earned_by_year: Dict[str, Decimal] = Field(default_factory=dict)


class SettlementCreate(BaseModel):
    ambassador_id: UUID
    # Omit to snapshot the current pending balance
    amount: Optional[Decimal] = Field(None, gt=0)
    remarks: Optional[str] = None


class SettlementResponse(BaseModel):
    id: UUID
    ambassador_id: UUID
    amount: Decimal
    status: SettlementStatus
    bank_reference: Optional[str] = None
    remarks: Optional[str] = None
    processed_by: Optional[UUID] = None
    payout_date: Optional[datetime] = None
    created_by: Optional[UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FinanceStatsResponse(BaseModel):
    pending: Decimal
    processed: Decimal
    total_count: int
