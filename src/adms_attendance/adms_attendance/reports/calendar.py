"""Calendar helpers for monthly reports.

Working days are Monday to Friday; public holidays are not modelled.
"""
from __future__ import annotations

from datetime import date
from typing import Any

from ..common.datetime_utils import month_bounds
from ..core.exceptions import ValidationError

MIN_YEAR = 1970
MAX_YEAR = 9999


def parse_period(month: Any, year: Any) -> tuple[int, int]:
    """Validate a (month, year) pair coming from user input or code."""

    try:
        if isinstance(month, bool) or isinstance(year, bool):
            raise ValueError
        m = int(str(month).strip())
        y = int(str(year).strip())
    except (TypeError, ValueError):
        raise ValidationError("month and year must be integers")

    if not 1 <= m <= 12:
        raise ValidationError("Invalid month value")
    if not MIN_YEAR <= y <= MAX_YEAR:
        raise ValidationError("Invalid year value")
    return m, y


def month_range(month: Any, year: Any) -> tuple[date, date]:
    m, y = parse_period(month, year)
    return month_bounds(m, y)


def working_days(month: Any, year: Any) -> int:
    first, last = month_range(month, year)
    return sum(1 for day in range(first.day, last.day + 1) if first.replace(day=day).weekday() < 5)
