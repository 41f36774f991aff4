"""
Sort Engine

Stable, direction-aware ordering of analysis outputs. Sorting always
returns a new list and never touches the analysis result it came from.

Strings compare by Unicode collation key so that kana order by reading
and hiragana/katakana interleave; numbers compare numerically. Missing
values ("-" or None) sort after every comparable value in either
direction, except in the per-month and fiscal-month orderings which
have their own rules.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from functools import cmp_to_key, lru_cache
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from pyuca import Collator

from .backlog import ClientListEntry
from .errors import AnalysisValidationError, ValidationCode
from .months import is_month_key
from .performance import PerformanceRecord
from .progress import ClientMatrixRow

T = TypeVar("T")

MISSING_MARKERS = ("-",)
MONTH_KEY_PREFIX = "month-"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @property
    def flipped(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


@dataclass(frozen=True)
class SortState:
    """The active sort column and its direction."""
    key: Optional[str] = None
    direction: SortDirection = SortDirection.ASC

    def toggle(self, key: str, first_direction: SortDirection = SortDirection.ASC) -> "SortState":
        """Repeat clicks on a key flip the direction; a new key starts at first_direction."""
        if key == self.key:
            return SortState(key=key, direction=self.direction.flipped)
        return SortState(key=key, direction=first_direction)

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "direction": self.direction.value}


@lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


@lru_cache(maxsize=4096)
def collation_key(text: str) -> Tuple[int, ...]:
    return _collator().sort_key(text)


def is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value in MISSING_MARKERS)


def compare_values(left: Any, right: Any) -> int:
    """Three-way comparison of two present values."""
    if isinstance(left, str) and isinstance(right, str):
        left_key, right_key = collation_key(left), collation_key(right)
    elif isinstance(left, str) or isinstance(right, str):
        left_key, right_key = str(left), str(right)
    else:
        left_key, right_key = left, right
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def sort_by(
    items: Sequence[T],
    value: Callable[[T], Any],
    direction: SortDirection = SortDirection.ASC,
) -> List[T]:
    """Stable sort on value(item); missing values always go last."""
    present = [item for item in items if not is_missing(value(item))]
    missing = [item for item in items if is_missing(value(item))]
    ordered = sorted(
        present,
        key=cmp_to_key(lambda a, b: compare_values(value(a), value(b))),
        reverse=direction is SortDirection.DESC,
    )
    return ordered + missing


# =============================================================================
# PROGRESS MATRIX
# =============================================================================

MATRIX_FIELDS: Dict[str, Callable[[ClientMatrixRow], Any]] = {
    "name": lambda row: row.client_name,
    "progress": lambda row: row.progress_rate,
    "staff": lambda row: row.staff_name,
    "fiscal-month": lambda row: row.fiscal_month,
    "completed": lambda row: row.completed_tasks,
    "total": lambda row: row.total_tasks,
}


def month_sort_key(month: str) -> str:
    return f"{MONTH_KEY_PREFIX}{month}"


def _month_rate(month: str) -> Callable[[ClientMatrixRow], int]:
    def rate(row: ClientMatrixRow) -> int:
        value = row.month_rate(month)
        return -1 if value is None else value
    return rate


def sort_matrix(rows: Sequence[ClientMatrixRow], state: SortState) -> List[ClientMatrixRow]:
    """
    Order matrix rows by a plain field or by one month's rate.

    A row without data for the month sorts as rate -1.
    """
    if state.key is None:
        return list(rows)
    if state.key.startswith(MONTH_KEY_PREFIX):
        month = state.key[len(MONTH_KEY_PREFIX):]
        if not is_month_key(month):
            raise AnalysisValidationError(
                ValidationCode.INVALID_SORT_KEY, f"Unknown sort key: {state.key}", field="key"
            )
        return sort_by(rows, _month_rate(month), state.direction)

    value = MATRIX_FIELDS.get(state.key)
    if value is None:
        raise AnalysisValidationError(
            ValidationCode.INVALID_SORT_KEY, f"Unknown sort key: {state.key}", field="key"
        )
    return sort_by(rows, value, state.direction)


# =============================================================================
# PERFORMANCE TABLE
# =============================================================================

PERFORMANCE_FIELDS: Dict[str, Callable[[PerformanceRecord], Any]] = {
    "name": lambda record: record.staff_name,
    "client-count": lambda record: record.client_count,
    "avg-completion": lambda record: record.avg_completion_rate,
    "completed-months": lambda record: record.completed_months,
    "delayed-months": lambda record: record.delayed_months,
}

DEFAULT_PERFORMANCE_SORT = SortState(key="avg-completion", direction=SortDirection.DESC)


def sort_performance(records: Sequence[PerformanceRecord], state: SortState) -> List[PerformanceRecord]:
    if state.key is None:
        return list(records)
    value = PERFORMANCE_FIELDS.get(state.key)
    if value is None:
        raise AnalysisValidationError(
            ValidationCode.INVALID_SORT_KEY, f"Unknown sort key: {state.key}", field="key"
        )
    return sort_by(records, value, state.direction)


# =============================================================================
# CLIENT LIST (FISCAL-MONTH ROLLING ORDER)
# =============================================================================

FISCAL_MONTH_KEY = "fiscal_month"
CLIENT_LIST_FIELDS = ("id", "name", "staff_name", "unattended_months", "latest_completed_month")


def fiscal_anchor_month(today: Optional[date] = None, offset: int = 2) -> int:
    """The month the rolling order starts from: offset months before now (1-12)."""
    current = (today or date.today()).month
    return (current - offset + 12) % 12 or 12


def fiscal_distance(fiscal_month: int, anchor: int) -> int:
    return (fiscal_month - anchor + 12) % 12


def sort_by_fiscal_month(
    entries: Sequence[ClientListEntry],
    direction: SortDirection = SortDirection.ASC,
    today: Optional[date] = None,
    anchor_offset: int = 2,
) -> List[ClientListEntry]:
    """
    Nearest upcoming fiscal month first, counted from the rolling anchor.

    Ties go to the client unattended longest; a client that never
    finished a month counts as unattended forever. Clients without a
    fiscal month come last. Only the distance order follows direction.
    """
    anchor = fiscal_anchor_month(today, anchor_offset)

    def backlog(entry: ClientListEntry) -> float:
        return float("inf") if entry.unattended_months is None else entry.unattended_months

    def compare(a: ClientListEntry, b: ClientListEntry) -> int:
        if a.fiscal_month is None and b.fiscal_month is None:
            return 0
        if a.fiscal_month is None:
            return 1
        if b.fiscal_month is None:
            return -1

        a_distance = fiscal_distance(a.fiscal_month, anchor)
        b_distance = fiscal_distance(b.fiscal_month, anchor)
        if a_distance == b_distance:
            a_backlog, b_backlog = backlog(a), backlog(b)
            if a_backlog == b_backlog:
                return 0
            return -1 if a_backlog > b_backlog else 1

        result = -1 if a_distance < b_distance else 1
        return result if direction is SortDirection.ASC else -result

    return sorted(entries, key=cmp_to_key(compare))


def sort_client_list(
    entries: Sequence[ClientListEntry],
    state: Optional[SortState] = None,
    today: Optional[date] = None,
    anchor_offset: int = 2,
) -> List[ClientListEntry]:
    """Client list order; defaults to the fiscal-month rolling order."""
    state = state or SortState(key=FISCAL_MONTH_KEY)
    if state.key in (None, FISCAL_MONTH_KEY):
        return sort_by_fiscal_month(entries, state.direction, today, anchor_offset)
    if state.key not in CLIENT_LIST_FIELDS:
        raise AnalysisValidationError(
            ValidationCode.INVALID_SORT_KEY, f"Unknown sort key: {state.key}", field="key"
        )
    return sort_by(entries, lambda entry: entry.value(state.key), state.direction)
