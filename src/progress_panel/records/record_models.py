"""
Record Models

Data models for the three input collections: clients, staff and
monthly task records.

Rows arrive from the persistence layer as plain mappings. They are
ingested here once, so the aggregation code never has to re-check raw
task values or free-text month statuses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

DONE_MARKER = "完了"
UNASSIGNED_STAFF_NAME = "未設定"


def same_id(left: Any, right: Any) -> bool:
    """Loose identifier equality: 1 and "1" name the same record."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


class ClientStatus(str, Enum):
    """Lifecycle status of a client."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "ClientStatus":
        """Parse a stored status, defaulting to ACTIVE."""
        if not value:
            return cls.ACTIVE
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.ACTIVE


class MonthStatus(str, Enum):
    """Month-level status of a task record."""
    NORMAL = "normal"
    DELAYED = "遅延"
    STALLED = "停滞"

    @property
    def is_delayed(self) -> bool:
        """Delayed and stalled both mean the month is behind."""
        return self in (MonthStatus.DELAYED, MonthStatus.STALLED)

    @classmethod
    def from_text(cls, value: Optional[str]) -> "MonthStatus":
        if value == cls.DELAYED.value:
            return cls.DELAYED
        if value == cls.STALLED.value:
            return cls.STALLED
        return cls.NORMAL


class TaskCompletion(str, Enum):
    """Completion state of a single checklist task."""
    DONE = "done"
    NOT_DONE = "not_done"

    @classmethod
    def from_value(cls, value: Any) -> "TaskCompletion":
        """
        Resolve a stored task value.

        Only boolean True and the legacy marker "完了" count as done.
        Everything else (False, None, other strings, numbers) is not done.
        """
        if value is True or value == DONE_MARKER:
            return cls.DONE
        return cls.NOT_DONE

    @property
    def is_done(self) -> bool:
        return self is TaskCompletion.DONE


def _parse_fiscal_month(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        month = int(value)
    except (TypeError, ValueError):
        return None
    return month if 1 <= month <= 12 else None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class Staff:
    """A staff member responsible for clients."""
    id: Any
    name: str = ""

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Staff":
        return cls(id=row.get("id"), name=row.get("name") or "")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Client:
    """
    An accounting-firm client whose books are kept monthly.

    fiscal_month is the month (1-12) in which the client's fiscal
    year closes; None when it was never recorded.
    """
    id: Any
    name: str = ""
    staff_id: Any = None
    fiscal_month: Optional[int] = None
    status: ClientStatus = ClientStatus.ACTIVE

    # Denormalized staff join and extra columns carried by the client table
    staff_name: Optional[str] = None
    accounting_method: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == ClientStatus.ACTIVE

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Client":
        staff_join = row.get("staffs")
        staff_name = row.get("staff_name")
        if staff_name is None and isinstance(staff_join, Mapping):
            staff_name = staff_join.get("name")

        return cls(
            id=row.get("id"),
            name=row.get("name") or "",
            staff_id=row.get("staff_id"),
            fiscal_month=_parse_fiscal_month(row.get("fiscal_month")),
            status=ClientStatus.from_string(row.get("status")),
            staff_name=staff_name,
            accounting_method=row.get("accounting_method"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "staff_id": self.staff_id,
            "fiscal_month": self.fiscal_month,
            "status": self.status.value,
            "staff_name": self.staff_name,
            "accounting_method": self.accounting_method,
        }


@dataclass(frozen=True)
class MonthlyTaskRecord:
    """
    One client's bookkeeping checklist for one calendar month.

    tasks maps task name to its resolved completion. When the stored
    tasks field was missing or not a mapping the record keeps an empty
    map and malformed_tasks is set; it then counts as 0/0.
    """
    client_id: Any
    month: str
    tasks: Tuple[Tuple[str, TaskCompletion], ...] = ()
    status: MonthStatus = MonthStatus.NORMAL
    status_text: Optional[str] = None
    malformed_tasks: bool = False

    # Extra columns carried by the monthly_tasks table
    id: Any = None
    completed: bool = False
    updated_at: Optional[datetime] = None

    @property
    def is_delayed(self) -> bool:
        return self.status.is_delayed

    @property
    def task_map(self) -> Dict[str, TaskCompletion]:
        return dict(self.tasks)

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "MonthlyTaskRecord":
        raw_tasks = row.get("tasks")
        malformed = not isinstance(raw_tasks, Mapping)
        if malformed:
            logger.warning(
                f"Monthly task record for client {row.get('client_id')} "
                f"({row.get('month')}) has no task map; counting it as 0/0"
            )
            tasks: Tuple[Tuple[str, TaskCompletion], ...] = ()
        else:
            tasks = tuple(
                (str(name), TaskCompletion.from_value(value))
                for name, value in raw_tasks.items()
            )

        status_text = row.get("status")
        return cls(
            client_id=row.get("client_id"),
            month=str(row.get("month") or ""),
            tasks=tasks,
            status=MonthStatus.from_text(status_text),
            status_text=status_text,
            malformed_tasks=malformed,
            id=row.get("id"),
            completed=row.get("completed") is True,
            updated_at=_parse_timestamp(row.get("updated_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "month": self.month,
            "tasks": {name: state.is_done for name, state in self.tasks},
            "status": self.status_text,
            "completed": self.completed,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def resolve_staff_name(staffs, staff_id: Any) -> str:
    """Look up a staff name, falling back to the unassigned sentinel."""
    for staff in staffs:
        if same_id(staff.id, staff_id):
            return staff.name
    logger.debug(f"No staff record for staff_id={staff_id!r}; using placeholder")
    return UNASSIGNED_STAFF_NAME
