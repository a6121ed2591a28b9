"""Unit tests for academic-year resolution of referrals."""

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from app.api.v1.benefits.academic_years import (
    AcademicYearWindow,
    ResolvedByAdmittedYear,
    ResolvedByDateFallback,
    ResolvedByStudentYear,
    filter_referrals_by_year,
    group_referrals_by_year,
    label_start_year,
    previous_year_label,
    referral_year_label,
    resolve_referral_year,
    window_from_label,
)

CURRENT = AcademicYearWindow(name="2025-2026", start_date=date(2025, 6, 1), end_date=date(2026, 6, 1), is_current=True)
PREVIOUS = AcademicYearWindow(name="2024-2025", start_date=date(2024, 6, 1), end_date=date(2025, 6, 1))


def _lead(admitted=None, student_year=None, created_at=datetime(2025, 8, 1)):
    student = SimpleNamespace(academic_year=student_year) if student_year is not None else None
    return SimpleNamespace(admitted_academic_year=admitted, student=student, created_at=created_at)


def test_admitted_year_wins_over_student_year_and_date() -> None:
    lead = _lead(admitted="2024-2025", student_year="2025-2026", created_at=datetime(2025, 9, 1))
    resolution = resolve_referral_year(lead, CURRENT)
    assert isinstance(resolution, ResolvedByAdmittedYear)
    assert resolution.in_year is False


def test_next_year_admission_counts_for_current_year() -> None:
    resolution = resolve_referral_year(_lead(admitted="2026-2027"), CURRENT)
    assert isinstance(resolution, ResolvedByAdmittedYear)
    assert resolution.in_year is True


def test_student_year_used_when_admitted_year_missing() -> None:
    resolution = resolve_referral_year(_lead(student_year="2024-2025"), PREVIOUS)
    assert isinstance(resolution, ResolvedByStudentYear)
    assert resolution.in_year is True


def test_unreadable_label_falls_through_for_current_year() -> None:
    resolution = resolve_referral_year(_lead(admitted="unknown", created_at=datetime(2025, 7, 1)), CURRENT)
    assert isinstance(resolution, ResolvedByDateFallback)
    assert resolution.in_year is True


@pytest.mark.parametrize(
    "created_at, expected",
    [
        (datetime(2024, 5, 31), False),
        (datetime(2024, 6, 1), True),
        (datetime(2025, 5, 31, 23, 59), True),
        (datetime(2025, 6, 1), False),
    ],
)
def test_date_fallback_uses_half_open_window_for_past_year(created_at, expected) -> None:
    resolution = resolve_referral_year(_lead(created_at=created_at), PREVIOUS)
    assert isinstance(resolution, ResolvedByDateFallback)
    assert resolution.in_year is expected


def test_date_fallback_for_current_year_is_open_ended() -> None:
    assert resolve_referral_year(_lead(created_at=datetime(2026, 9, 1)), CURRENT).in_year is True
    assert resolve_referral_year(_lead(created_at=datetime(2025, 5, 1)), CURRENT).in_year is False


def test_filter_without_year_returns_everything() -> None:
    leads = [_lead(admitted="2024-2025"), _lead()]
    assert filter_referrals_by_year(leads, None) == leads
    assert filter_referrals_by_year(leads, CURRENT) == [leads[1]]


def test_window_from_label() -> None:
    window = window_from_label("2025-2026", is_current=True)
    assert window.start_date == date(2025, 6, 1)
    assert window.end_date == date(2026, 6, 1)
    assert label_start_year("bad") is None
    with pytest.raises(ValueError):
        window_from_label("next year")


def test_only_previous_year_label_is_excluded_from_current_year() -> None:
    previous = resolve_referral_year(_lead(admitted="2024-2025", created_at=datetime(2025, 9, 1)), CURRENT)
    assert isinstance(previous, ResolvedByAdmittedYear)
    assert previous.in_year is False

    # Older labels fall through to the student year, then to the creation date
    older = resolve_referral_year(_lead(admitted="2022-2023", student_year="2025-2026"), CURRENT)
    assert isinstance(older, ResolvedByStudentYear)
    assert older.in_year is True

    dated = resolve_referral_year(_lead(admitted="2022-2023", created_at=datetime(2025, 9, 1)), CURRENT)
    assert isinstance(dated, ResolvedByDateFallback)
    assert dated.in_year is True


def test_referrals_are_grouped_by_credited_year() -> None:
    leads = [
        _lead(admitted="2025-2026"),
        _lead(admitted="2026-2027"),
        _lead(admitted="2024-2025"),
        _lead(student_year="2024-2025"),
        _lead(created_at=datetime(2024, 2, 1)),
    ]

    groups = group_referrals_by_year(leads, CURRENT)

    assert {label: len(items) for label, items in groups.items()} == {
        "2025-2026": 2,
        "2024-2025": 2,
        "2023-2024": 1,
    }
    assert referral_year_label(leads[4], CURRENT) == "2023-2024"
    assert previous_year_label("2025-2026") == "2024-2025"
