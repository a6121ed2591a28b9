"""Unit tests for the benefit calculator."""

from decimal import Decimal

from app.api.v1.benefits.calculator import calculate_total_benefit
from app.api.v1.benefits.schemas import AmbassadorContext, ReferralBasis


def _refs(*fees):
    return [ReferralBasis(id=i + 1, fee_basis_amount=Decimal(str(f)) if f is not None else None) for i, f in enumerate(fees)]


def test_fee_discount_applies_once_against_own_fee() -> None:
    context = AmbassadorContext(role="Parent", base_student_fee=Decimal("60000"))
    result = calculate_total_benefit(_refs(90000, 90000, 90000), context)

    assert result.percent == 20
    assert result.fee_discount is True
    assert result.total_amount == Decimal("12000")
    assert all(c.amount == 0 for c in result.contributions)
    assert len(result.contributions) == 3


def test_cash_benefit_is_summed_per_referral() -> None:
    context = AmbassadorContext(role="Alumni", base_student_fee=Decimal("60000"))
    result = calculate_total_benefit(_refs(50000, 60000, 70000, 80000), context)

    assert result.percent == 80
    assert result.fee_discount is False
    assert result.total_amount == Decimal("208000")
    assert [c.amount for c in result.contributions] == [
        Decimal("40000"), Decimal("48000"), Decimal("56000"), Decimal("64000"),
    ]


def test_elite_carryover_added_with_one_referral() -> None:
    context = AmbassadorContext(role="Parent", base_student_fee=Decimal("60000"), is_elite_last_year=True)
    result = calculate_total_benefit(_refs(75000), context)

    assert result.tier_amount == Decimal("3000")
    assert result.carryover_base == Decimal("9000")
    assert result.carryover_bonus == Decimal("3000")
    assert result.total_amount == Decimal("15000")


def test_elite_carryover_needs_a_referral_this_year() -> None:
    context = AmbassadorContext(role="Parent", base_student_fee=Decimal("60000"), is_elite_last_year=True)
    result = calculate_total_benefit([], context)

    assert result.total_amount == 0
    assert result.carryover_base == 0
    assert result.carryover_bonus == 0


def test_missing_and_negative_amounts_are_clamped() -> None:
    context = AmbassadorContext(role="Other", base_student_fee=Decimal("-100"))
    result = calculate_total_benefit(_refs(None, -5000, 10000), context)

    assert result.percent == 60
    assert result.total_amount == Decimal("6000")
    assert result.contributions[0].fee_basis_amount == 0
    assert result.contributions[1].fee_basis_amount == 0


def test_missing_base_fee_yields_zero_discount() -> None:
    context = AmbassadorContext(role="Parent", base_student_fee=None)
    result = calculate_total_benefit(_refs(50000, 50000), context)
    assert result.total_amount == 0


def test_result_rounds_to_cents() -> None:
    context = AmbassadorContext(role="Alumni")
    result = calculate_total_benefit(_refs("333.33"), context)
    assert result.total_amount == Decimal("66.67")
