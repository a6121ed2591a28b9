"""
Referral store access for the benefit engine: year-filtered referral queries, fee basis
lookup, and the confirmation transition that refreshes the ambassador's cached figures.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.benefits.academic_years import (
    AcademicYearWindow,
    filter_referrals_by_year,
    window_from_label,
)
from app.api.v1.benefits.schemas import ReferralBasis
from app.api.v1.benefits.tiers import (
    MAX_TIER_COUNT,
    is_elite_for_year,
    long_term_confirmation_percent,
    resolve_confirmation_percent,
)
from app.auth.rbac import Capability, ensure_capability
from app.auth.schemas import CurrentUser
from app.core.audit_service import log_action
from app.core.config import settings
from app.core.enums import BenefitStatus, FeeType, LeadStatus
from app.core.exceptions import InvalidStateTransitionError, NotFoundError, StorageError
from app.core.models import AcademicYear, Ambassador, BenefitSlab, CampusFee, ReferralLead

from .schemas import ConfirmReferralResponse, ReferralLeadResponse

logger = structlog.get_logger()


def _to_decimal(val) -> Optional[Decimal]:
    if val is None:
        return None
    return val if isinstance(val, Decimal) else Decimal(str(val))


# --- Academic years ---
async def get_academic_year_window(
    db: AsyncSession, name: Optional[str] = None, *, is_current: Optional[bool] = None
) -> AcademicYearWindow:
    """Boundaries for a year label. Falls back to a June-to-June window when no row exists."""
    name = name or settings.current_academic_year
    if is_current is None:
        is_current = name == settings.current_academic_year
    row = (
        await db.execute(select(AcademicYear).where(AcademicYear.name == name))
    ).scalar_one_or_none()
    if row is None:
        return window_from_label(name, is_current=is_current)
    return AcademicYearWindow(
        name=row.name,
        start_date=row.start_date,
        end_date=row.end_date,
        is_current=is_current,
    )


# --- Referral queries ---
async def list_referrals(db: AsyncSession, ambassador_id: UUID) -> List[ReferralLead]:
    """All leads referred by the ambassador, oldest first."""
    result = await db.execute(
        select(ReferralLead)
        .where(ReferralLead.ambassador_id == ambassador_id)
        .order_by(ReferralLead.created_at)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().unique().all())


async def list_confirmed_leads(
    db: AsyncSession,
    ambassador_id: UUID,
    academic_year: Optional[AcademicYearWindow] = None,
) -> List[ReferralLead]:
    """Confirmed leads, fresh from the store; never derived from the cached counter."""
    result = await db.execute(
        select(ReferralLead)
        .where(
            ReferralLead.ambassador_id == ambassador_id,
            ReferralLead.status == LeadStatus.CONFIRMED.value,
        )
        .order_by(ReferralLead.created_at)
        .execution_options(populate_existing=True)
    )
    return filter_referrals_by_year(result.scalars().unique().all(), academic_year)


async def list_confirmed_referrals(
    db: AsyncSession,
    ambassador_id: UUID,
    academic_year: Optional[AcademicYearWindow] = None,
    default_fee: Optional[Decimal] = None,
) -> List[ReferralBasis]:
    leads = await list_confirmed_leads(db, ambassador_id, academic_year)
    return await to_referral_bases(db, leads, default_fee)


async def to_referral_bases(
    db: AsyncSession,
    leads: Sequence[ReferralLead],
    default_fee: Optional[Decimal] = None,
) -> List[ReferralBasis]:
    bases = []
    for lead in leads:
        fee = await fee_basis_for_lead(db, lead, default_fee)
        bases.append(ReferralBasis(id=lead.id, fee_basis_amount=fee))
    return bases


# --- Fee basis ---
async def resolve_fee_basis(
    db: AsyncSession,
    campus_id: Optional[int],
    grade: Optional[str],
    academic_year: Optional[str],
    fee_type: str,
) -> Optional[Decimal]:
    """Fee-table amount for the campus/grade/year and fee type. None (not zero) when no row exists."""
    if campus_id is None or not grade or not academic_year:
        return None
    row = (
        await db.execute(
            select(CampusFee).where(
                CampusFee.campus_id == campus_id,
                CampusFee.grade == grade,
                CampusFee.academic_year == academic_year,
            )
        )
    ).scalar_one_or_none()
    if row is None:
        return None
    fee = row.wotp_fee if fee_type == FeeType.WOTP.value else row.otp_fee
    return _to_decimal(fee)


async def fee_basis_for_lead(
    db: AsyncSession,
    lead: ReferralLead,
    default_fee: Optional[Decimal] = None,
) -> Decimal:
    """
    Fee basis of a confirmed lead: explicit lead fee, then the admitted student's fee,
    then the campus fee table, then the caller default. Zero only when nothing exists.
    """
    if lead.annual_fee is not None:
        return _to_decimal(lead.annual_fee)
    student = lead.student
    if student is not None:
        for fee in (student.annual_fee, student.base_fee):
            if fee is not None:
                return _to_decimal(fee)

    year = lead.admitted_academic_year or (student.academic_year if student is not None else None)
    campus_id = lead.campus_id if lead.campus_id is not None else getattr(student, "campus_id", None)
    grade = lead.grade or getattr(student, "grade", None)
    fee = await resolve_fee_basis(
        db, campus_id, grade, year or settings.current_academic_year, lead.selected_fee_type
    )
    if fee is not None:
        return fee

    logger.warning(
        "fee_basis_missing",
        lead_id=str(lead.id),
        campus_id=campus_id,
        grade=grade,
        academic_year=year,
        fallback=str(default_fee) if default_fee is not None else "0",
    )
    return _to_decimal(default_fee) if default_fee is not None else Decimal("0")


# --- Benefit slab overrides ---
async def get_confirmation_overrides(db: AsyncSession) -> Dict[int, Decimal]:
    result = await db.execute(select(BenefitSlab))
    return {
        s.referral_count: _to_decimal(s.year_fee_benefit_percent)
        for s in result.scalars().all()
        if 1 <= s.referral_count <= MAX_TIER_COUNT
    }


# --- Confirmation transition ---
async def confirm_referral(
    db: AsyncSession,
    actor: CurrentUser,
    lead_id: UUID,
    admitted_academic_year: Optional[str] = None,
    student_id: Optional[UUID] = None,
) -> ConfirmReferralResponse:
    """
    Mark a lead Confirmed and refresh the ambassador's cached figures.
    Counts are recomputed from referral rows, never incremented.
    """
    ensure_capability(actor, Capability.CONFIRM_REFERRAL)

    lead = await db.get(ReferralLead, lead_id)
    if lead is None:
        raise NotFoundError("Referral not found")
    if lead.status == LeadStatus.CONFIRMED.value:
        raise InvalidStateTransitionError("Referral already confirmed")
    if lead.status == LeadStatus.REJECTED.value:
        raise InvalidStateTransitionError("Rejected referral cannot be confirmed")

    values = {"status": LeadStatus.CONFIRMED.value, "confirmed_at": datetime.utcnow()}
    if admitted_academic_year:
        values["admitted_academic_year"] = admitted_academic_year.strip()
    if student_id is not None:
        values["student_id"] = student_id

    try:
        result = await db.execute(
            update(ReferralLead)
            .where(
                ReferralLead.id == lead_id,
                ReferralLead.status.in_([LeadStatus.NEW.value, LeadStatus.FOLLOW_UP.value]),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            raise InvalidStateTransitionError("Referral already confirmed")

        ambassador = await db.get(Ambassador, lead.ambassador_id)
        if ambassador is None:
            await db.rollback()
            raise NotFoundError("Ambassador not found")

        current_year = await get_academic_year_window(db, is_current=True)
        confirmed = await list_confirmed_leads(db, ambassador.id)
        lifetime_count = len(confirmed)
        current_count = len(filter_referrals_by_year(confirmed, current_year))

        provisional = resolve_confirmation_percent(current_count, await get_confirmation_overrides(db))
        long_term = Decimal("0")
        if is_elite_for_year(ambassador, current_year.name, current_year.name):
            long_term = long_term_confirmation_percent(lifetime_count - current_count, current_count)
            if long_term > provisional:
                provisional = long_term

        ambassador.confirmed_referral_count = lifetime_count
        ambassador.provisional_benefit_percent = provisional
        ambassador.long_term_benefit_percent = long_term
        ambassador.benefit_status = (
            BenefitStatus.ACTIVE.value if lifetime_count >= 1 else BenefitStatus.INACTIVE.value
        )
        if current_count >= MAX_TIER_COUNT and not ambassador.elite_qualified_year:
            ambassador.elite_qualified_year = current_year.name

        await log_action(
            db,
            "UPDATE",
            "referral",
            f"Confirmed referral {lead_id} for ambassador {ambassador.full_name}",
            str(lead_id),
            {"confirmed_count": lifetime_count, "current_year_count": current_count},
            performed_by=actor.id,
            performed_by_role=actor.role.value,
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("referral_confirm_failed", lead_id=str(lead_id), error=str(exc))
        raise StorageError() from exc

    await db.refresh(lead)
    await db.refresh(ambassador)
    return ConfirmReferralResponse(
        lead=ReferralLeadResponse.model_validate(lead),
        confirmed_referral_count=ambassador.confirmed_referral_count,
        current_year_count=current_count,
        provisional_benefit_percent=_to_decimal(ambassador.provisional_benefit_percent),
        long_term_benefit_percent=_to_decimal(ambassador.long_term_benefit_percent),
        benefit_status=ambassador.benefit_status,
    )
