"""
Client backlog: how long a client's books have gone unattended.

A month counts as finished when its record carries the completed flag.
The unattended span runs from the latest finished month to the current
month, excluding the month just before the current one (it is normally
still being worked on).
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..records import Client, MonthlyTaskRecord, Staff, resolve_staff_name
from .months import is_month_key, month_of, months_elapsed

ALERT_RED = "red"
ALERT_YELLOW = "yellow"


def latest_completed_month(records: Iterable[MonthlyTaskRecord]) -> Optional[str]:
    finished = [r.month for r in records if r.completed and is_month_key(r.month)]
    return max(finished) if finished else None


def unattended_months(latest: Optional[str], today: Optional[date] = None) -> Optional[int]:
    """Months without a finished record, None when nothing was ever finished."""
    if latest is None:
        return None
    elapsed = months_elapsed(latest, month_of(today or date.today())) - 1
    return max(elapsed, 0)


def backlog_alert(
    unattended: Optional[int],
    yellow_threshold: int = 2,
    red_threshold: int = 3,
) -> Optional[str]:
    if unattended is None:
        return None
    if unattended >= red_threshold:
        return ALERT_RED
    if unattended >= yellow_threshold:
        return ALERT_YELLOW
    return None


@dataclass(frozen=True)
class ClientListEntry:
    """A client row of the client list with its backlog figures."""
    client: Client
    staff_name: str
    latest_completed_month: Optional[str]
    unattended_months: Optional[int]
    alert: Optional[str] = None

    @property
    def fiscal_month(self) -> Optional[int]:
        return self.client.fiscal_month

    def value(self, key: str) -> Any:
        """Field lookup used by the client list sort."""
        if key == "staff_name":
            return self.staff_name
        if key == "latest_completed_month":
            return self.latest_completed_month
        if key == "unattended_months":
            return self.unattended_months
        return getattr(self.client, key, None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.client.to_dict(),
            "staff_name": self.staff_name,
            "latest_completed_month": self.latest_completed_month,
            "unattended_months": self.unattended_months,
            "alert": self.alert,
        }


def build_client_list(
    clients: Sequence[Client],
    staffs: Sequence[Staff],
    tasks: Sequence[MonthlyTaskRecord],
    today: Optional[date] = None,
    yellow_threshold: int = 2,
    red_threshold: int = 3,
) -> List[ClientListEntry]:
    """Backlog figures for each client, in input order."""
    today = today or date.today()
    by_client: Dict[str, List[MonthlyTaskRecord]] = {}
    for record in tasks:
        by_client.setdefault(str(record.client_id), []).append(record)

    entries = []
    for client in clients:
        latest = latest_completed_month(by_client.get(str(client.id), []))
        unattended = unattended_months(latest, today)
        if client.staff_name is not None:
            staff_name = client.staff_name
        elif client.staff_id is None:
            staff_name = ""
        else:
            staff_name = resolve_staff_name(staffs, client.staff_id)
        entries.append(ClientListEntry(
            client=client,
            staff_name=staff_name,
            latest_completed_month=latest,
            unattended_months=unattended,
            alert=backlog_alert(unattended, yellow_threshold, red_threshold) if client.is_active else None,
        ))
    return entries
