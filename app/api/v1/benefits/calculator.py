"""
Benefit calculator: confirmed referrals + ambassador context -> total benefit with breakdown.

Pure and synchronous. Bad inputs (negative fees, missing amounts) are clamped to zero
rather than raised, so a dashboard always gets a bounded figure.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from .schemas import AmbassadorContext, BenefitResult, ReferralBasis, ReferralContribution
from .tiers import is_elite, is_fee_discount_eligible, resolve_percent

CARRYOVER_BASE_PERCENT = Decimal("15")
CARRYOVER_NEW_REFERRAL_BONUS_PERCENT = Decimal("5")

_HUNDRED = Decimal("100")
_CENT = Decimal("0.01")


def _money(value) -> Decimal:
    if value is None:
        return Decimal("0")
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    if amount.is_nan() or amount < 0:
        return Decimal("0")
    return amount


def _percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return (amount * percent / _HUNDRED).quantize(_CENT, rounding=ROUND_HALF_UP)


def calculate_total_benefit(
    referrals: Optional[Sequence[ReferralBasis]],
    context: AmbassadorContext,
) -> BenefitResult:
    """
    Compute the total benefit for one evaluation year.

    Fee-discount ambassadors get one discount on their own fee; the referral count only
    picks the tier. Cash ambassadors get the tier percent of every referral's fee basis.
    Elite ambassadors with at least one referral this year also get the long-term
    carryover (15% base + 5% new-referral bonus of their own fee).
    """
    referrals = list(referrals or [])
    count = len(referrals)
    percent = resolve_percent(count, context)
    base_fee = _money(context.base_student_fee)
    fee_discount = is_fee_discount_eligible(context.role, context.child_enrolled_at_school)

    contributions = []
    if fee_discount:
        tier_amount = _percent_of(base_fee, percent)
        for r in referrals:
            contributions.append(
                ReferralContribution(
                    referral_id=r.id,
                    fee_basis_amount=_money(r.fee_basis_amount),
                    amount=Decimal("0.00"),
                )
            )
    else:
        tier_amount = Decimal("0.00")
        for r in referrals:
            basis = _money(r.fee_basis_amount)
            amount = _percent_of(basis, percent)
            tier_amount += amount
            contributions.append(
                ReferralContribution(referral_id=r.id, fee_basis_amount=basis, amount=amount)
            )

    carryover_base = Decimal("0.00")
    carryover_bonus = Decimal("0.00")
    if is_elite(context) and count >= 1:
        carryover_base = _percent_of(base_fee, CARRYOVER_BASE_PERCENT)
        carryover_bonus = _percent_of(base_fee, CARRYOVER_NEW_REFERRAL_BONUS_PERCENT)

    return BenefitResult(
        total_amount=tier_amount + carryover_base + carryover_bonus,
        percent=percent,
        referral_count=count,
        fee_discount=fee_discount,
        tier_amount=tier_amount,
        carryover_base=carryover_base,
        carryover_bonus=carryover_bonus,
        contributions=contributions,
    )
