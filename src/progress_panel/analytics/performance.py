"""
Performance Aggregator

Per-staff scorecards over a resolved period: completion rate, fully
completed months, delayed months and a qualitative level.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence
import logging

from ..records import Client, MonthlyTaskRecord, Staff, same_id
from .classifier import TaskCounts, classify_records
from .filters import client_id_set, filter_tasks_in_period
from .months import months_between
from .periods import Period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformanceLevel:
    """Qualitative rating with its display colour and an ordinal score."""
    level: str
    color: str
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "color": self.color, "score": self.score}


EXCELLENT = PerformanceLevel("優秀", "#28a745", 4)
GOOD = PerformanceLevel("良好", "#17a2b8", 3)
STANDARD = PerformanceLevel("標準", "#ffc107", 2)
NEEDS_IMPROVEMENT = PerformanceLevel("要改善", "#dc3545", 1)


def get_performance_level(completion_rate: int) -> PerformanceLevel:
    if completion_rate >= 95:
        return EXCELLENT
    if completion_rate >= 85:
        return GOOD
    if completion_rate >= 70:
        return STANDARD
    return NEEDS_IMPROVEMENT


@dataclass(frozen=True)
class PerformanceRecord:
    """One staff member's scorecard for a period."""
    staff_id: Any
    staff_name: str
    client_count: int
    total_tasks: int
    completed_tasks: int
    completed_months: int
    delayed_months: int
    client_ids: List[Any] = field(default_factory=list)

    @property
    def avg_completion_rate(self) -> int:
        return TaskCounts(self.completed_tasks, self.total_tasks).rate

    @property
    def performance_level(self) -> PerformanceLevel:
        return get_performance_level(self.avg_completion_rate)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "staffId": self.staff_id,
            "staffName": self.staff_name,
            "clientCount": self.client_count,
            "totalTasks": self.total_tasks,
            "completedTasks": self.completed_tasks,
            "avgCompletionRate": self.avg_completion_rate,
            "completedMonths": self.completed_months,
            "delayedMonths": self.delayed_months,
            "performanceLevel": self.performance_level.to_dict(),
            "clientIds": list(self.client_ids),
        }


def count_completed_months(tasks: Sequence[MonthlyTaskRecord], months: Sequence[str]) -> int:
    """Months whose pooled tasks are all done (months with no tasks do not count)."""
    completed = 0
    for month in months:
        counts = classify_records(r for r in tasks if r.month == month)
        if counts.is_fully_completed:
            completed += 1
    return completed


def count_delayed_months(tasks: Sequence[MonthlyTaskRecord], months: Sequence[str]) -> int:
    """Distinct months with at least one delayed or stalled record."""
    delayed = {record.month for record in tasks if record.is_delayed}
    return sum(1 for month in months if month in delayed)


def staff_performance(
    staff: Staff,
    clients: Sequence[Client],
    tasks: Sequence[MonthlyTaskRecord],
    period: Period,
) -> PerformanceRecord:
    staff_clients = [client for client in clients if same_id(client.staff_id, staff.id)]
    period_tasks = filter_tasks_in_period(
        tasks, client_id_set(staff_clients), period.start, period.end
    )
    months = months_between(period.start, period.end)
    counts = classify_records(period_tasks)

    return PerformanceRecord(
        staff_id=staff.id,
        staff_name=staff.name,
        client_count=len(staff_clients),
        total_tasks=counts.total,
        completed_tasks=counts.completed,
        completed_months=count_completed_months(period_tasks, months),
        delayed_months=count_delayed_months(period_tasks, months),
        client_ids=[client.id for client in staff_clients],
    )


def aggregate_performance(
    staffs: Sequence[Staff],
    clients: Sequence[Client],
    tasks: Sequence[MonthlyTaskRecord],
    period: Period,
) -> List[PerformanceRecord]:
    """One record per staff member, in staff order (unsorted)."""
    records = [staff_performance(staff, clients, tasks, period) for staff in staffs]
    logger.info(
        f"Performance analysis {period.start}..{period.end}: "
        f"{len(records)} staff, {len(clients)} clients"
    )
    return records
