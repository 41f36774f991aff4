"""
Period resolution for performance analysis.

Named presets and explicit custom ranges resolve to inclusive
"YYYY-MM" boundaries relative to a reference day.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import AnalysisValidationError, ValidationCode
from .months import is_month_key, month_key, month_label, month_of, shift_month


class PeriodPreset(str, Enum):
    CURRENT_YEAR = "current-year"
    LAST_QUARTER = "last-quarter"
    LAST_6_MONTHS = "last-6-months"
    LAST_12_MONTHS = "last-12-months"
    CUSTOM = "custom"

    @classmethod
    def from_string(cls, value: str) -> "PeriodPreset":
        try:
            return cls(value)
        except ValueError:
            raise AnalysisValidationError(
                ValidationCode.INVALID_PRESET, f"無効な期間タイプです: {value!r}", field="preset"
            )


@dataclass(frozen=True)
class Period:
    """Inclusive month range."""
    start: str
    end: str

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}


def trailing_months(count: int, today: Optional[date] = None) -> Period:
    """The last count months including the current one."""
    current = month_of(today or date.today())
    return Period(start=shift_month(current, -(count - 1)), end=current)


def default_period(today: Optional[date] = None, months: int = 12) -> Period:
    return trailing_months(months, today)


def resolve_period(
    preset: Any,
    start: Optional[str] = None,
    end: Optional[str] = None,
    today: Optional[date] = None,
) -> Period:
    """
    Resolve a preset (or a custom start/end pair) to month boundaries.

    Raises:
        AnalysisValidationError: unknown preset, incomplete or malformed
            custom range, or start after end
    """
    if not isinstance(preset, PeriodPreset):
        preset = PeriodPreset.from_string(str(preset))
    today = today or date.today()

    if preset == PeriodPreset.CURRENT_YEAR:
        period = Period(start=month_key(today.year, 1), end=month_of(today))
    elif preset == PeriodPreset.LAST_QUARTER:
        quarter_start = (today.month - 1) // 3 * 3 - 3
        if quarter_start < 0:
            period = Period(start=month_key(today.year - 1, 10), end=month_key(today.year - 1, 12))
        else:
            period = Period(
                start=month_key(today.year, quarter_start + 1),
                end=month_key(today.year, quarter_start + 3),
            )
    elif preset == PeriodPreset.LAST_6_MONTHS:
        period = trailing_months(6, today)
    elif preset == PeriodPreset.LAST_12_MONTHS:
        period = trailing_months(12, today)
    else:
        if not start or not end:
            raise AnalysisValidationError(
                ValidationCode.MISSING_PERIOD, "カスタム期間を正しく設定してください", field="start"
            )
        for name, value in (("start", start), ("end", end)):
            if not is_month_key(value):
                raise AnalysisValidationError(
                    ValidationCode.INVALID_PERIOD,
                    f"Invalid month key: {value!r} (expected YYYY-MM)",
                    field=name,
                )
        period = Period(start=start, end=end)

    if period.start > period.end:
        raise AnalysisValidationError(
            ValidationCode.INVERTED_PERIOD,
            "開始期間は終了期間より前に設定してください",
            field="start",
        )
    return period


def period_options(today: Optional[date] = None, months_back: int = 24) -> List[Dict[str, str]]:
    """Selectable months from months_back months ago up to now, oldest first."""
    current = month_of(today or date.today())
    options = []
    for offset in range(months_back, -1, -1):
        key = shift_month(current, -offset)
        options.append({"value": key, "label": month_label(key)})
    return options
