"""Academic year labels of the form "YYYY-YYYY"."""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from school_admin.core import clock
from school_admin.core.config import settings

_ACADEMIC_YEAR_RE = re.compile(r"^\d{4}-\d{4}$", re.ASCII)


@dataclass(frozen=True)
class AcademicYearValidation:
    valid: bool
    message: str
    start_year: Optional[int] = None
    end_year: Optional[int] = None


def validate_academic_year(academic_year: str) -> AcademicYearValidation:
    """Check the label format and that the end year follows the start year. Never raises."""
    if not isinstance(academic_year, str) or not _ACADEMIC_YEAR_RE.fullmatch(academic_year):
        return AcademicYearValidation(
            valid=False,
            message="Academic year must be in format YYYY-YYYY (e.g., 2025-2026)",
        )
    start_str, end_str = academic_year.split("-")
    start, end = int(start_str), int(end_str)
    if end != start + 1:
        return AcademicYearValidation(
            valid=False,
            message="End year must be exactly one year after start year",
            start_year=start,
            end_year=end,
        )
    return AcademicYearValidation(valid=True, message="Valid academic year", start_year=start, end_year=end)


def get_start_year(academic_year: str) -> Optional[int]:
    validation = validate_academic_year(academic_year)
    return validation.start_year if validation.valid else None


def generate_academic_year(start_year: int) -> str:
    return f"{start_year}-{start_year + 1}"


def get_current_academic_year(today: Optional[date] = None, start_month: Optional[int] = None) -> str:
    """Label of the academic year containing `today`.

    From `start_month` onwards the year starts in the current calendar year,
    before it the year started in the previous one.
    """
    if today is None:
        today = clock.today()
    if start_month is None:
        start_month = settings.academic_year_start_month
    if today.month >= start_month:
        return generate_academic_year(today.year)
    return generate_academic_year(today.year - 1)
