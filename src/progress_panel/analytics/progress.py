"""
Progress Aggregator

Turns filtered clients and monthly task records into the overall
summary, the attention list and the client x month progress matrix.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
import logging

from ..records import (
    Client,
    MonthlyTaskRecord,
    Staff,
    resolve_staff_name,
)
from .classifier import TaskCounts, classify_record, classify_records, round_half_up
from .composition import StatusComposition, compose_status
from .filters import (
    FilterCriteria,
    client_id_set,
    filter_clients,
    filter_tasks_in_period,
    records_for_client,
    validate_criteria,
)
from .months import months_between

logger = logging.getLogger(__name__)

ATTENTION_RATE_THRESHOLD = 50

REASON_DELAYED = "遅延・停滞"
REASON_LOW_PROGRESS = "進捗率低下"

PROGRESS_GREEN = "#28a745"
PROGRESS_YELLOW = "#ffc107"
PROGRESS_RED = "#dc3545"


def progress_color(rate: int) -> str:
    """Colour band for a completion rate."""
    if rate >= 80:
        return PROGRESS_GREEN
    if rate >= 50:
        return PROGRESS_YELLOW
    return PROGRESS_RED


@dataclass(frozen=True)
class AttentionClient:
    """A client flagged for manager review."""
    name: str
    progress_rate: int
    reason: str
    client_id: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "progressRate": self.progress_rate,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class Summary:
    total_tasks: int = 0
    completed_tasks: int = 0
    attention_clients: List[AttentionClient] = field(default_factory=list)
    status_composition: StatusComposition = field(default_factory=StatusComposition)

    @property
    def progress_rate(self) -> int:
        return TaskCounts(self.completed_tasks, self.total_tasks).rate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "progressRate": self.progress_rate,
            "completedTasks": self.completed_tasks,
            "totalTasks": self.total_tasks,
            "attentionClients": [c.to_dict() for c in self.attention_clients],
            "statusComposition": self.status_composition.to_dict(),
        }


@dataclass(frozen=True)
class ClientMatrixRow:
    """One client's row of the progress matrix."""
    client_id: Any
    client_name: str
    staff_name: str
    fiscal_month: Optional[int]
    completed_tasks: int
    total_tasks: int
    monthly_progress: Dict[str, TaskCounts]

    @property
    def progress_rate(self) -> int:
        return TaskCounts(self.completed_tasks, self.total_tasks).rate

    def month_rate(self, month: str) -> Optional[int]:
        counts = self.monthly_progress.get(month)
        return counts.rate if counts is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clientId": self.client_id,
            "clientName": self.client_name,
            "staffName": self.staff_name,
            "fiscalMonth": self.fiscal_month,
            "progressRate": self.progress_rate,
            "completedTasks": self.completed_tasks,
            "totalTasks": self.total_tasks,
            "monthlyProgress": {
                month: counts.to_dict() for month, counts in self.monthly_progress.items()
            },
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Summary and matrix of one progress analysis."""
    criteria: FilterCriteria
    months: List[str]
    summary: Summary
    matrix: List[ClientMatrixRow]
    generated_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": {
                "startPeriod": self.criteria.start_period,
                "endPeriod": self.criteria.end_period,
            },
            "months": list(self.months),
            "summary": self.summary.to_dict(),
            "matrix": [row.to_dict() for row in self.matrix],
            "generatedAt": self.generated_at.isoformat(),
        }


def find_attention_clients(
    clients: Sequence[Client],
    tasks: Sequence[MonthlyTaskRecord],
    rate_threshold: int = ATTENTION_RATE_THRESHOLD,
) -> List[AttentionClient]:
    """
    Flag clients below the rate threshold or with a delayed month.

    A client with no tasks at all is only flagged for a delayed month.
    The delayed reason wins when both conditions hold. Input order is kept.
    """
    flagged = []
    for client in clients:
        client_records = records_for_client(tasks, client.id)
        counts = classify_records(client_records)
        has_delayed_status = any(record.is_delayed for record in client_records)

        rate = counts.completed / counts.total * 100 if counts.total > 0 else 0
        low_progress = rate < rate_threshold and counts.total > 0

        if low_progress or has_delayed_status:
            reason = REASON_DELAYED if has_delayed_status else REASON_LOW_PROGRESS
            flagged.append(AttentionClient(
                name=client.name,
                progress_rate=round_half_up(rate),
                reason=reason,
                client_id=client.id,
            ))
    return flagged


def summarize(
    clients: Sequence[Client],
    tasks: Sequence[MonthlyTaskRecord],
    rate_threshold: int = ATTENTION_RATE_THRESHOLD,
) -> Summary:
    """Overall totals, attention list and status composition."""
    totals = classify_records(tasks)
    return Summary(
        total_tasks=totals.total,
        completed_tasks=totals.completed,
        attention_clients=find_attention_clients(clients, tasks, rate_threshold),
        status_composition=compose_status(tasks),
    )


def monthly_progress_for_client(
    client_records: Sequence[MonthlyTaskRecord],
    months: Sequence[str],
) -> Dict[str, TaskCounts]:
    """Counts per month; months without a record are 0/0."""
    progress = {}
    for month in months:
        progress[month] = classify_records(r for r in client_records if r.month == month)
    return progress


def build_matrix(
    clients: Sequence[Client],
    tasks: Sequence[MonthlyTaskRecord],
    staffs: Sequence[Staff],
    start: str,
    end: str,
) -> List[ClientMatrixRow]:
    """One row per client, attention status notwithstanding."""
    months = months_between(start, end)
    rows = []
    for client in clients:
        client_records = records_for_client(tasks, client.id)
        counts = classify_records(client_records)
        rows.append(ClientMatrixRow(
            client_id=client.id,
            client_name=client.name,
            staff_name=resolve_staff_name(staffs, client.staff_id),
            fiscal_month=client.fiscal_month,
            completed_tasks=counts.completed,
            total_tasks=counts.total,
            monthly_progress=monthly_progress_for_client(client_records, months),
        ))
    return rows


def analyze(
    clients: Sequence[Client],
    staffs: Sequence[Staff],
    tasks: Sequence[MonthlyTaskRecord],
    criteria: FilterCriteria,
    rate_threshold: int = ATTENTION_RATE_THRESHOLD,
) -> AnalysisResult:
    """
    Run a full progress analysis.

    Raises:
        AnalysisValidationError: if the criteria are invalid; nothing is
            aggregated in that case
    """
    validate_criteria(criteria)

    selected_clients = filter_clients(clients, criteria)
    period_tasks = filter_tasks_in_period(
        tasks,
        client_id_set(selected_clients),
        criteria.start_period,
        criteria.end_period,
    )

    result = AnalysisResult(
        criteria=criteria,
        months=months_between(criteria.start_period, criteria.end_period),
        summary=summarize(selected_clients, period_tasks, rate_threshold),
        matrix=build_matrix(
            selected_clients, period_tasks, staffs,
            criteria.start_period, criteria.end_period,
        ),
    )

    logger.info(
        f"Progress analysis {criteria.start_period}..{criteria.end_period}: "
        f"{len(selected_clients)} clients, {len(period_tasks)} monthly records, "
        f"{result.summary.progress_rate}% complete"
    )
    return result
