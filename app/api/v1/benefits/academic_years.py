"""
Academic-year membership of a referral.

Source data is populated inconsistently, so membership is resolved by the first rule
that has data, in this order:
1. the lead's admitted academic year,
2. the admitted student's recorded academic year,
3. the lead's creation date against the year boundaries.
The returned variant names the rule that decided.
"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel


class AcademicYearWindow(BaseModel):
    name: str  # "2025-2026"
    start_date: date
    end_date: date
    is_current: bool = False


class ResolvedByAdmittedYear(BaseModel):
    rule: Literal["admitted_year"] = "admitted_year"
    label: str
    in_year: bool


class ResolvedByStudentYear(BaseModel):
    rule: Literal["student_year"] = "student_year"
    label: str
    in_year: bool


class ResolvedByDateFallback(BaseModel):
    rule: Literal["date_fallback"] = "date_fallback"
    created_on: Optional[date] = None
    in_year: bool


YearResolution = Union[ResolvedByAdmittedYear, ResolvedByStudentYear, ResolvedByDateFallback]


def label_start_year(label: Optional[str]) -> Optional[int]:
    """'2025-2026' -> 2025. None when the label is not in that shape."""
    if not label:
        return None
    head = str(label).strip().split("-")[0]
    return int(head) if head.isdigit() and len(head) == 4 else None


def window_from_label(name: str, is_current: bool = False) -> AcademicYearWindow:
    """Default June-to-June window for a year label that has no academic_years row."""
    start = label_start_year(name)
    if start is None:
        raise ValueError(f"Invalid academic year label: {name!r}")
    return AcademicYearWindow(
        name=name,
        start_date=date(start, 6, 1),
        end_date=date(start + 1, 6, 1),
        is_current=is_current,
    )


def previous_year_label(label: Optional[str]) -> Optional[str]:
    """'2025-2026' -> '2024-2025'."""
    start = label_start_year(label)
    if start is None:
        return None
    return f"{start - 1}-{start}"


def _label_verdict(label: str, year: AcademicYearWindow) -> Optional[bool]:
    if not year.is_current:
        return label.strip() == year.name
    # Current year also owns admissions already booked for the following year.
    # Only the immediately previous year is excluded outright; any other label falls through.
    lead_start = label_start_year(label)
    year_start = label_start_year(year.name)
    if lead_start is None or year_start is None:
        return True if label.strip() == year.name else None
    if lead_start in (year_start, year_start + 1):
        return True
    if lead_start == year_start - 1:
        return False
    return None


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def resolve_referral_year(lead, year: AcademicYearWindow) -> YearResolution:
    """Decide whether a lead belongs to the given academic year, and by which rule."""
    admitted = getattr(lead, "admitted_academic_year", None)
    if admitted:
        verdict = _label_verdict(admitted, year)
        if verdict is not None:
            return ResolvedByAdmittedYear(label=admitted, in_year=verdict)

    student = getattr(lead, "student", None)
    student_year = getattr(student, "academic_year", None) if student is not None else None
    if student_year:
        verdict = _label_verdict(student_year, year)
        if verdict is not None:
            return ResolvedByStudentYear(label=student_year, in_year=verdict)

    created_on = _as_date(getattr(lead, "created_at", None))
    if created_on is None:
        return ResolvedByDateFallback(created_on=None, in_year=False)
    if year.is_current:
        in_year = created_on >= year.start_date
    else:
        in_year = year.start_date <= created_on < year.end_date
    return ResolvedByDateFallback(created_on=created_on, in_year=in_year)


def filter_referrals_by_year(leads: Iterable, year: Optional[AcademicYearWindow]) -> List:
    """Leads belonging to the year; all leads when no year is given."""
    leads = list(leads)
    if year is None:
        return leads
    return [lead for lead in leads if resolve_referral_year(lead, year).in_year]


def referral_year_label(lead, current: AcademicYearWindow) -> str:
    """
    Academic year a lead is credited to. Leads the current year claims go to the current
    year; the rest go to their recorded label, or to the June-to-June year of their
    creation date.
    """
    if resolve_referral_year(lead, current).in_year:
        return current.name
    student = getattr(lead, "student", None)
    for label in (
        getattr(lead, "admitted_academic_year", None),
        getattr(student, "academic_year", None) if student is not None else None,
    ):
        if label_start_year(label) is not None:
            return label.strip()
    created_on = _as_date(getattr(lead, "created_at", None))
    if created_on is None:
        return current.name
    start = created_on.year if created_on.month >= 6 else created_on.year - 1
    return f"{start}-{start + 1}"


def group_referrals_by_year(leads: Iterable, current: AcademicYearWindow) -> Dict[str, List]:
    """Leads keyed by the academic year they are credited to."""
    groups: Dict[str, List] = {}
    for lead in leads:
        groups.setdefault(referral_year_label(lead, current), []).append(lead)
    return groups
