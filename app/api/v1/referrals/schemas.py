"""Referral schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import FeeType, LeadStatus


class ReferralLeadResponse(BaseModel):
    id: UUID
    ambassador_id: UUID
    parent_name: Optional[str] = None
    status: LeadStatus
    student_id: Optional[UUID] = None
    admitted_academic_year: Optional[str] = None
    selected_fee_type: FeeType
    campus_id: Optional[int] = None
    grade: Optional[str] = None
    annual_fee: Optional[Decimal] = None
    created_at: datetime
    confirmed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ConfirmReferralRequest(BaseModel):
    admitted_academic_year: Optional[str] = Field(None, max_length=20, description="e.g. 2025-2026")
    student_id: Optional[UUID] = None


class ConfirmReferralResponse(BaseModel):
    lead: ReferralLeadResponse
    confirmed_referral_count: int
    current_year_count: int
    provisional_benefit_percent: Decimal
    long_term_benefit_percent: Decimal
    benefit_status: str
