"""Benefit schemas: calculator inputs/outputs and benefit slab administration."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import AmbassadorRole

ReferralId = Union[UUID, int, str]


# --- Calculator ---
class ReferralBasis(BaseModel):
    """A confirmed referral reduced to what the calculator needs."""

    id: ReferralId
    fee_basis_amount: Optional[Decimal] = None


class AmbassadorContext(BaseModel):
    role: Union[AmbassadorRole, str]
    child_enrolled_at_school: bool = False
    base_student_fee: Optional[Decimal] = None
    is_elite_last_year: bool = False
    # Confirmed referrals of the previous academic year, already filtered by the caller
    previous_year_confirmed_referrals: List[ReferralBasis] = Field(default_factory=list)


class ReferralContribution(BaseModel):
    referral_id: ReferralId
    fee_basis_amount: Decimal
    amount: Decimal


class BenefitResult(BaseModel):
    total_amount: Decimal
    percent: Decimal
    referral_count: int
    fee_discount: bool
    tier_amount: Decimal
    carryover_base: Decimal = Decimal("0")
    carryover_bonus: Decimal = Decimal("0")
    contributions: List[ReferralContribution] = Field(default_factory=list)


class YearlyBenefit(BaseModel):
    academic_year: str
    result: BenefitResult


class LifetimeBenefit(BaseModel):
    """Calculator results for every academic year with confirmed referrals, oldest first."""

    current_academic_year: str
    total_amount: Decimal
    years: List[YearlyBenefit] = Field(default_factory=list)

    @property
    def current(self) -> BenefitResult:
        return next(y.result for y in self.years if y.academic_year == self.current_academic_year)


class BenefitSummaryResponse(BaseModel):
    ambassador_id: UUID
    academic_year: str
    confirmed_count: int
    earned: BenefitResult
    potential: BenefitResult


# --- Benefit slabs ---
class BenefitSlabCreate(BaseModel):
    tier_name: Optional[str] = Field(None, max_length=50)
    referral_count: int = Field(..., ge=1, le=5)
    year_fee_benefit_percent: Decimal = Field(..., ge=0, le=100)
    long_term_extra_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    base_long_term_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    description: Optional[str] = None


class BenefitSlabUpdate(BaseModel):
    tier_name: Optional[str] = Field(None, max_length=50)
    referral_count: Optional[int] = Field(None, ge=1, le=5)
    year_fee_benefit_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    long_term_extra_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    base_long_term_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    description: Optional[str] = None


class BenefitSlabResponse(BaseModel):
    id: UUID
    tier_name: Optional[str] = None
    referral_count: int
    year_fee_benefit_percent: Decimal
    long_term_extra_percent: Decimal
    base_long_term_percent: Decimal
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
