"""
Tier slab resolution: confirmed-referral count -> benefit percent.

Two tables exist on purpose and are kept apart:
- the calculator ladders (STANDARD_DISCOUNT_LADDER / ELITE_DISCOUNT_LADDER), used for
  earned amounts and payouts;
- the confirmation-time table (CONFIRMATION_DEFAULT_SLABS), overridable through
  benefit_slabs rows, used for the provisional percent stored on the ambassador
  when a referral is confirmed.
They differ at count 3 (20 vs 25).
"""

from decimal import Decimal
from typing import Dict, Mapping, Optional, Union

from app.core.enums import AmbassadorRole

from .academic_years import label_start_year

MAX_TIER_COUNT = 5
CASH_PERCENT_PER_REFERRAL = 20

STANDARD_DISCOUNT_LADDER: Dict[int, int] = {1: 5, 2: 10, 3: 20, 4: 30, 5: 50}
ELITE_DISCOUNT_LADDER: Dict[int, int] = {1: 5, 2: 10, 3: 15, 4: 20, 5: 25}

CONFIRMATION_DEFAULT_SLABS: Dict[int, int] = {1: 5, 2: 10, 3: 25, 4: 30, 5: 50}

# Long-term track for elite ambassadors at confirmation time
LONG_TERM_PRIOR_REFERRAL_PERCENT = 3
LONG_TERM_CURRENT_REFERRAL_PERCENT = 5


def clamp_count(count: Optional[int]) -> int:
    """Clamp a referral count into [0, MAX_TIER_COUNT]. None and negatives become 0."""
    if count is None:
        return 0
    try:
        value = int(count)
    except (TypeError, ValueError):
        return 0
    return max(0, min(value, MAX_TIER_COUNT))


def is_fee_discount_eligible(role: Union[AmbassadorRole, str, None], child_enrolled_at_school: bool) -> bool:
    """Parents, and staff with a child at the school, earn fee discounts; everyone else earns cash."""
    value = role.value if isinstance(role, AmbassadorRole) else role
    if value == AmbassadorRole.PARENT.value:
        return True
    return value == AmbassadorRole.STAFF.value and bool(child_enrolled_at_school)


def resolve_percent(confirmed_count: Optional[int], context) -> Decimal:
    """
    Benefit percent for a confirmed-referral count and an ambassador context.

    Cash-eligible: 20% per referral, capped at 100%.
    Fee-discount-eligible: standard or elite ladder, depending on last year's status.
    """
    count = clamp_count(confirmed_count)
    if count == 0:
        return Decimal("0")
    if not is_fee_discount_eligible(context.role, context.child_enrolled_at_school):
        return Decimal(count * CASH_PERCENT_PER_REFERRAL)
    ladder = ELITE_DISCOUNT_LADDER if is_elite(context) else STANDARD_DISCOUNT_LADDER
    return Decimal(ladder[count])


def is_elite_for_year(ambassador, year_label: str, current_label: str) -> bool:
    """
    Elite standing carried into the given year: the explicit last-year flag (current year only),
    or a top-tier year recorded by the confirmation transition in any earlier year.
    """
    if year_label == current_label and ambassador.is_elite_last_year:
        return True
    qualified = label_start_year(ambassador.elite_qualified_year)
    evaluated = label_start_year(year_label)
    return qualified is not None and evaluated is not None and qualified < evaluated


def is_elite(context) -> bool:
    """Elite when flagged last year, or when last year's confirmed referrals reached the top tier."""
    if context.is_elite_last_year:
        return True
    previous = getattr(context, "previous_year_confirmed_referrals", None) or []
    return len(previous) >= MAX_TIER_COUNT


def resolve_confirmation_percent(
    count: Optional[int],
    overrides: Optional[Mapping[int, Decimal]] = None,
) -> Decimal:
    """Provisional percent at confirmation time; benefit_slabs rows override the defaults per count."""
    lookup = clamp_count(count)
    if lookup == 0:
        return Decimal("0")
    if overrides and lookup in overrides and overrides[lookup] is not None:
        return Decimal(str(overrides[lookup]))
    return Decimal(CONFIRMATION_DEFAULT_SLABS[lookup])


def long_term_confirmation_percent(prior_count: int, current_count: int) -> Decimal:
    """Cumulative long-term percent; only active once the ambassador has a referral this year."""
    if current_count < 1:
        return Decimal("0")
    prior = max(0, prior_count)
    return Decimal(prior * LONG_TERM_PRIOR_REFERRAL_PERCENT + current_count * LONG_TERM_CURRENT_REFERRAL_PERCENT)
