"""Payout schemas."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.v1.settlements.schemas import SettlementResponse
from app.core.enums import PayoutOutcome


class PayoutRequest(BaseModel):
    transaction_reference: str = Field(..., min_length=1, max_length=100)
    remarks: Optional[str] = None


class PayoutResponse(BaseModel):
    ok: bool
    settlement: SettlementResponse


class BulkPayoutItem(BaseModel):
    settlement_id: UUID
    transaction_reference: str = Field(..., min_length=1, max_length=100)
    remarks: Optional[str] = None


class BulkPayoutRequest(BaseModel):
    items: List[BulkPayoutItem] = Field(..., min_length=1)


class BulkPayoutItemResult(BaseModel):
    settlement_id: UUID
    outcome: PayoutOutcome
    reason: Optional[str] = None


class BulkPayoutResponse(BaseModel):
    success_count: int
    failure_count: int
    results: List[BulkPayoutItemResult]
