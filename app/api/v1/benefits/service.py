"""Benefit service: per-ambassador benefit evaluation and benefit slab administration."""

from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

import structlog
from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.referrals.service import (
    get_academic_year_window,
    list_confirmed_leads,
    list_referrals,
    to_referral_bases,
)
from app.auth.rbac import Capability, ensure_capability
from app.auth.schemas import CurrentUser
from app.core.audit_service import log_action
from app.core.config import settings
from app.core.enums import LeadStatus
from app.core.exceptions import NotFoundError, ServiceError, StorageError
from app.core.models import Ambassador, BenefitSlab

from .academic_years import (
    AcademicYearWindow,
    filter_referrals_by_year,
    group_referrals_by_year,
    label_start_year,
    previous_year_label,
)
from .calculator import calculate_total_benefit
from .schemas import (
    AmbassadorContext,
    BenefitResult,
    BenefitSlabCreate,
    BenefitSlabResponse,
    BenefitSlabUpdate,
    BenefitSummaryResponse,
    LifetimeBenefit,
    ReferralBasis,
    YearlyBenefit,
)
from .tiers import is_elite_for_year

logger = structlog.get_logger()


async def get_ambassador(db: AsyncSession, ambassador_id: UUID) -> Ambassador:
    ambassador = await db.get(Ambassador, ambassador_id)
    if ambassador is None:
        raise NotFoundError("Ambassador not found")
    return ambassador


def _context(
    ambassador: Ambassador, year_label: str, current_label: str, previous_leads: Sequence
) -> AmbassadorContext:
    return AmbassadorContext(
        role=ambassador.role,
        child_enrolled_at_school=bool(ambassador.child_enrolled_at_school),
        base_student_fee=ambassador.base_student_fee,
        is_elite_last_year=is_elite_for_year(ambassador, year_label, current_label),
        previous_year_confirmed_referrals=[ReferralBasis(id=lead.id) for lead in previous_leads],
    )


async def build_context(
    db: AsyncSession, ambassador: Ambassador, year_label: Optional[str] = None
) -> AmbassadorContext:
    """Ambassador context for one year, with the preceding year's confirmed referrals pre-filtered."""
    current_label = settings.current_academic_year
    year_label = year_label or current_label
    if year_label == current_label:
        previous_label = settings.previous_academic_year
    else:
        previous_label = previous_year_label(year_label)
    previous_leads = []
    if previous_label:
        previous_year = await get_academic_year_window(db, previous_label, is_current=False)
        previous_leads = await list_confirmed_leads(db, ambassador.id, previous_year)
    return _context(ambassador, year_label, current_label, previous_leads)


async def evaluate_ambassador(
    db: AsyncSession,
    ambassador: Ambassador,
    academic_year: Optional[AcademicYearWindow] = None,
    statuses: Sequence[LeadStatus] = (LeadStatus.CONFIRMED,),
) -> BenefitResult:
    """Run the calculator over the ambassador's leads for one academic year (current by default)."""
    if academic_year is None:
        academic_year = await get_academic_year_window(db, is_current=True)
    wanted = {s.value for s in statuses}
    if wanted == {LeadStatus.CONFIRMED.value}:
        leads = await list_confirmed_leads(db, ambassador.id, academic_year)
    else:
        leads = [
            lead
            for lead in filter_referrals_by_year(await list_referrals(db, ambassador.id), academic_year)
            if lead.status in wanted
        ]
    bases = await to_referral_bases(db, leads, settings.default_fee_basis)
    context = await build_context(db, ambassador, academic_year.name)
    return calculate_total_benefit(bases, context)


async def evaluate_ambassador_all_years(db: AsyncSession, ambassador: Ambassador) -> LifetimeBenefit:
    """
    Run the calculator once per academic year over all confirmed leads and sum the results.
    Each year gets its own tier, so a year never borrows referrals from another.
    """
    current_year = await get_academic_year_window(db, is_current=True)
    groups = group_referrals_by_year(await list_confirmed_leads(db, ambassador.id), current_year)
    groups.setdefault(current_year.name, [])

    years = []
    for label in sorted(groups, key=lambda name: label_start_year(name) or 0):
        bases = await to_referral_bases(db, groups[label], settings.default_fee_basis)
        context = _context(ambassador, label, current_year.name, groups.get(previous_year_label(label), []))
        years.append(YearlyBenefit(academic_year=label, result=calculate_total_benefit(bases, context)))

    return LifetimeBenefit(
        current_academic_year=current_year.name,
        total_amount=sum((y.result.total_amount for y in years), Decimal("0")),
        years=years,
    )


async def get_benefit_summary(db: AsyncSession, ambassador_id: UUID) -> BenefitSummaryResponse:
    """Earned (confirmed) and potential (every lead not rejected) benefit for the current year."""
    ambassador = await get_ambassador(db, ambassador_id)
    current_year = await get_academic_year_window(db, is_current=True)
    earned = await evaluate_ambassador(db, ambassador, current_year)
    potential = await evaluate_ambassador(
        db,
        ambassador,
        current_year,
        statuses=(LeadStatus.NEW, LeadStatus.FOLLOW_UP, LeadStatus.CONFIRMED),
    )
    return BenefitSummaryResponse(
        ambassador_id=ambassador.id,
        academic_year=current_year.name,
        confirmed_count=earned.referral_count,
        earned=earned,
        potential=potential,
    )


# --- Benefit slabs ---
def _slab_to_response(slab: BenefitSlab) -> BenefitSlabResponse:
    return BenefitSlabResponse.model_validate(slab)


async def list_benefit_slabs(db: AsyncSession) -> List[BenefitSlabResponse]:
    result = await db.execute(select(BenefitSlab).order_by(BenefitSlab.referral_count))
    return [_slab_to_response(s) for s in result.scalars().all()]


async def add_benefit_slab(
    db: AsyncSession,
    actor: CurrentUser,
    payload: BenefitSlabCreate,
) -> BenefitSlabResponse:
    ensure_capability(actor, Capability.MANAGE_BENEFIT_SLABS)
    slab = BenefitSlab(**payload.model_dump())
    db.add(slab)
    try:
        await db.flush()
        await log_action(
            db, "CREATE", "benefit_slab",
            f"Added benefit tier for {payload.referral_count} referrals: {payload.year_fee_benefit_percent}%",
            str(slab.id),
            performed_by=actor.id,
            performed_by_role=actor.role.value,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError(
            f"A benefit tier for {payload.referral_count} referrals already exists",
            status.HTTP_409_CONFLICT,
        )
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError() from exc
    await db.refresh(slab)
    return _slab_to_response(slab)


async def update_benefit_slab(
    db: AsyncSession,
    actor: CurrentUser,
    slab_id: UUID,
    payload: BenefitSlabUpdate,
) -> BenefitSlabResponse:
    ensure_capability(actor, Capability.MANAGE_BENEFIT_SLABS)
    slab = await db.get(BenefitSlab, slab_id)
    if slab is None:
        raise NotFoundError("Benefit tier not found")
    changes = payload.model_dump(exclude_unset=True)
    old_value = {k: str(getattr(slab, k)) for k in changes}
    for key, value in changes.items():
        setattr(slab, key, value)
    try:
        await log_action(
            db, "UPDATE", "benefit_slab",
            f"Updated benefit tier for {slab.referral_count} referrals",
            str(slab.id),
            {"old": old_value, "new": {k: str(v) for k, v in changes.items()}},
            performed_by=actor.id,
            performed_by_role=actor.role.value,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("A benefit tier for this referral count already exists", status.HTTP_409_CONFLICT)
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError() from exc
    await db.refresh(slab)
    return _slab_to_response(slab)


async def delete_benefit_slab(db: AsyncSession, actor: CurrentUser, slab_id: UUID) -> None:
    ensure_capability(actor, Capability.MANAGE_BENEFIT_SLABS)
    slab = await db.get(BenefitSlab, slab_id)
    if slab is None:
        raise NotFoundError("Benefit tier not found")
    try:
        await db.delete(slab)
        await log_action(
            db, "DELETE", "benefit_slab",
            f"Deleted benefit tier for {slab.referral_count} referrals",
            str(slab_id),
            performed_by=actor.id,
            performed_by_role=actor.role.value,
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError() from exc
    logger.info("benefit_slab_deleted", slab_id=str(slab_id))
