"""
Month keys and calendar-month ranges.

A month key is always "YYYY-MM" with a zero-padded month, so lexical
order and chronological order coincide.
"""

import re
from datetime import date
from typing import List, Tuple

from .errors import AnalysisValidationError, ValidationCode

_MONTH_KEY = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month(key: str) -> Tuple[int, int]:
    """Split a month key into (year, month), rejecting malformed keys."""
    match = _MONTH_KEY.match(key or "")
    if not match:
        raise AnalysisValidationError(
            ValidationCode.INVALID_PERIOD, f"Invalid month key: {key!r} (expected YYYY-MM)"
        )
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise AnalysisValidationError(
            ValidationCode.INVALID_PERIOD, f"Invalid month in key: {key!r}"
        )
    return year, month


def is_month_key(key: str) -> bool:
    try:
        parse_month(key)
    except AnalysisValidationError:
        return False
    return True


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_of(day: date) -> str:
    """Month key of a calendar date."""
    return month_key(day.year, day.month)


def shift_month(key: str, delta: int) -> str:
    """Move a month key by delta calendar months (negative goes back)."""
    year, month = parse_month(key)
    index = year * 12 + (month - 1) + delta
    return month_key(index // 12, index % 12 + 1)


def months_elapsed(start: str, end: str) -> int:
    """Signed number of calendar months from start to end."""
    start_year, start_month = parse_month(start)
    end_year, end_month = parse_month(end)
    return (end_year - start_year) * 12 + (end_month - start_month)


def months_between(start: str, end: str) -> List[str]:
    """
    Every month key from start to end, inclusive, ascending.

    Steps one calendar month at a time. Returns an empty list when
    start is after end; callers validate the period before getting here.
    """
    count = months_elapsed(start, end) + 1
    return [shift_month(start, offset) for offset in range(max(count, 0))]


def month_label(key: str) -> str:
    """Display label, e.g. "2024年4月"."""
    year, month = parse_month(key)
    return f"{year}年{month}月"
