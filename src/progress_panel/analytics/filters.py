"""
Filter Engine

Narrows clients by staff assignment and fiscal month, and monthly task
records by client membership and month range. Source collections are
never modified; every filter returns a new list.
"""

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Union
import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..records import Client, ClientStatus, MonthlyTaskRecord, same_id
from .errors import AnalysisValidationError, ValidationCode
from .months import is_month_key

logger = logging.getLogger(__name__)


class FilterCriteria(BaseModel):
    """Filters for one progress analysis request."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    start_period: str = Field("", alias="startPeriod", description="First month, YYYY-MM")
    end_period: str = Field("", alias="endPeriod", description="Last month, YYYY-MM (inclusive)")
    staff_id: Optional[Union[int, str]] = Field(None, alias="staffId")
    fiscal_month: Optional[int] = Field(None, alias="fiscalMonth")

    # Client list only
    search: Optional[str] = None
    include_inactive: bool = Field(False, alias="includeInactive")

    @field_validator("staff_id", "fiscal_month", "search", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("start_period", "end_period", mode="before")
    @classmethod
    def _strip_period(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value


def validate_criteria(criteria: FilterCriteria) -> None:
    """
    Reject criteria that cannot be aggregated.

    Raises:
        AnalysisValidationError: missing, malformed or inverted period,
            or a fiscal month outside 1-12
    """
    if not criteria.start_period or not criteria.end_period:
        raise AnalysisValidationError(
            ValidationCode.MISSING_PERIOD,
            "期間を選択してください",
            field="start_period" if not criteria.start_period else "end_period",
        )

    for name in ("start_period", "end_period"):
        value = getattr(criteria, name)
        if not is_month_key(value):
            raise AnalysisValidationError(
                ValidationCode.INVALID_PERIOD,
                f"Invalid month key: {value!r} (expected YYYY-MM)",
                field=name,
            )

    if criteria.start_period > criteria.end_period:
        raise AnalysisValidationError(
            ValidationCode.INVERTED_PERIOD,
            "開始年月は終了年月より前に設定してください",
            field="start_period",
        )

    if criteria.fiscal_month is not None and not 1 <= criteria.fiscal_month <= 12:
        raise AnalysisValidationError(
            ValidationCode.INVALID_FISCAL_MONTH,
            f"Fiscal month must be between 1 and 12, got {criteria.fiscal_month}",
            field="fiscal_month",
        )


def filter_clients(clients: Iterable[Client], criteria: FilterCriteria) -> List[Client]:
    """Keep clients matching the staff and fiscal-month filters, in input order."""
    selected = []
    for client in clients:
        if criteria.staff_id is not None and not same_id(client.staff_id, criteria.staff_id):
            continue
        if criteria.fiscal_month is not None and not same_id(client.fiscal_month, criteria.fiscal_month):
            continue
        selected.append(client)
    return selected


def client_id_set(clients: Iterable[Client]) -> Set[str]:
    """Identifier set for membership tests under loose equality."""
    return {str(client.id) for client in clients if client.id is not None}


def filter_tasks_in_period(
    tasks: Iterable[MonthlyTaskRecord],
    client_ids: Set[str],
    start: str,
    end: str,
) -> List[MonthlyTaskRecord]:
    """
    Keep records of the given clients whose month lies in [start, end].

    Records whose month is not a valid key never match.
    """
    selected = []
    for record in tasks:
        if record.client_id is None or str(record.client_id) not in client_ids:
            continue
        if not is_month_key(record.month):
            logger.debug(f"Skipping record with invalid month {record.month!r}")
            continue
        if start <= record.month <= end:
            selected.append(record)
    return selected


def records_for_client(tasks: Sequence[MonthlyTaskRecord], client_id: Any) -> List[MonthlyTaskRecord]:
    return [record for record in tasks if same_id(record.client_id, client_id)]


def filter_client_list(
    clients: Iterable[Client],
    search: Optional[str] = None,
    staff_id: Any = None,
    fiscal_month: Optional[int] = None,
    include_inactive: bool = False,
    staff_names: Optional[Mapping[str, str]] = None,
) -> List[Client]:
    """
    Filter the client list view.

    Search matches the client name or staff name case-insensitively.
    Active clients are always shown; inactive and deleted clients only
    when include_inactive is set. staff_names supplies resolved staff
    names (by client id) for rows without a denormalized name.
    """
    term = (search or "").strip().lower()
    selected = []
    for client in clients:
        if term:
            name_hit = term in client.name.lower()
            staff_name = client.staff_name
            if staff_name is None and staff_names is not None:
                staff_name = staff_names.get(str(client.id))
            staff_hit = term in (staff_name or "").lower()
            if not (name_hit or staff_hit):
                continue
        if staff_id not in (None, "") and not same_id(client.staff_id, staff_id):
            continue
        if fiscal_month not in (None, "") and not same_id(client.fiscal_month, fiscal_month):
            continue
        if client.status != ClientStatus.ACTIVE and not include_inactive:
            continue
        selected.append(client)
    return selected
