"""
Progress Analytics Engine

Pure aggregation over clients, staff and monthly task records:
- Month ranges and period presets
- Task-completion counting and status composition
- Client filtering and the client x month progress matrix
- Attention flags for clients falling behind
- Per-staff performance scorecards
- Table sorting, including the fiscal-month rolling order

Nothing here performs I/O; the data-access layer supplies snapshots.
"""

from .backlog import ClientListEntry, backlog_alert, build_client_list, unattended_months
from .classifier import TaskCounts, classify, classify_record, classify_records, percentage
from .composition import StatusComposition, compose_status
from .context import (
    AnalysisContext,
    performance_rows,
    resort_matrix,
    resort_performance,
    run_performance_analysis,
    run_progress_analysis,
)
from .errors import AnalysisValidationError, ValidationCode
from .filters import (
    FilterCriteria,
    filter_client_list,
    filter_clients,
    filter_tasks_in_period,
    validate_criteria,
)
from .months import month_label, months_between, parse_month, shift_month
from .performance import (
    PerformanceLevel,
    PerformanceRecord,
    aggregate_performance,
    get_performance_level,
)
from .periods import Period, PeriodPreset, default_period, period_options, resolve_period
from .progress import (
    AnalysisResult,
    AttentionClient,
    ClientMatrixRow,
    Summary,
    analyze,
    build_matrix,
    progress_color,
    summarize,
)
from .sorting import (
    SortDirection,
    SortState,
    sort_by_fiscal_month,
    sort_client_list,
    sort_matrix,
    sort_performance,
)

__all__ = [
    "AnalysisContext",
    "AnalysisResult",
    "AnalysisValidationError",
    "AttentionClient",
    "ClientListEntry",
    "ClientMatrixRow",
    "FilterCriteria",
    "PerformanceLevel",
    "PerformanceRecord",
    "Period",
    "PeriodPreset",
    "SortDirection",
    "SortState",
    "StatusComposition",
    "Summary",
    "TaskCounts",
    "ValidationCode",
    "aggregate_performance",
    "analyze",
    "backlog_alert",
    "build_client_list",
    "build_matrix",
    "classify",
    "classify_record",
    "classify_records",
    "compose_status",
    "default_period",
    "filter_client_list",
    "filter_clients",
    "filter_tasks_in_period",
    "get_performance_level",
    "month_label",
    "months_between",
    "parse_month",
    "percentage",
    "period_options",
    "progress_color",
    "resolve_period",
    "resort_matrix",
    "resort_performance",
    "performance_rows",
    "run_performance_analysis",
    "run_progress_analysis",
    "shift_month",
    "sort_by_fiscal_month",
    "sort_client_list",
    "sort_matrix",
    "sort_performance",
    "summarize",
    "unattended_months",
]
