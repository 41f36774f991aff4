"""
Analysis context.

Everything a page of analysis carries between calls: the criteria, the
last result, the performance period and records, and the active sort
of each table. Contexts are immutable; every operation returns a new
one, so independent analyses never share state.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from ..records import Client, MonthlyTaskRecord, Staff
from .errors import AnalysisValidationError, ValidationCode
from .filters import FilterCriteria
from .performance import PerformanceRecord, aggregate_performance
from .periods import Period
from .progress import ATTENTION_RATE_THRESHOLD, AnalysisResult, ClientMatrixRow, analyze
from .sorting import (
    DEFAULT_PERFORMANCE_SORT,
    SortDirection,
    SortState,
    sort_matrix,
    sort_performance,
)


@dataclass(frozen=True)
class AnalysisContext:
    criteria: Optional[FilterCriteria] = None
    last_result: Optional[AnalysisResult] = None
    matrix_sort: SortState = SortState()

    performance_period: Optional[Period] = None
    last_performance: Optional[Tuple[PerformanceRecord, ...]] = None
    performance_sort: SortState = DEFAULT_PERFORMANCE_SORT


def run_progress_analysis(
    context: AnalysisContext,
    criteria: FilterCriteria,
    clients: Sequence[Client],
    staffs: Sequence[Staff],
    tasks: Sequence[MonthlyTaskRecord],
    rate_threshold: int = ATTENTION_RATE_THRESHOLD,
) -> AnalysisContext:
    """Analyse and replace the previous result; the matrix sort is reset."""
    result = analyze(clients, staffs, tasks, criteria, rate_threshold)
    return replace(context, criteria=criteria, last_result=result, matrix_sort=SortState())


def resort_matrix(
    context: AnalysisContext,
    key: str,
    direction: Optional[SortDirection] = None,
) -> Tuple[AnalysisContext, List[ClientMatrixRow]]:
    """
    Sort the cached matrix by key without re-running the analysis.

    Without an explicit direction, repeating the current key flips the
    direction and a new key starts ascending.
    """
    if context.last_result is None:
        raise AnalysisValidationError(ValidationCode.NO_ANALYSIS, "先に集計を実行してください")
    state = SortState(key, direction) if direction else context.matrix_sort.toggle(key)
    rows = sort_matrix(context.last_result.matrix, state)
    return replace(context, matrix_sort=state), rows


def run_performance_analysis(
    context: AnalysisContext,
    period: Period,
    staffs: Sequence[Staff],
    clients: Sequence[Client],
    tasks: Sequence[MonthlyTaskRecord],
) -> AnalysisContext:
    """
    Compute fresh scorecards for a resolved period.

    Records are kept in staff order; the default order applies to
    performance_rows only.
    """
    records = aggregate_performance(staffs, clients, tasks, period)
    return replace(
        context,
        performance_period=period,
        last_performance=tuple(records),
        performance_sort=DEFAULT_PERFORMANCE_SORT,
    )


def performance_rows(context: AnalysisContext) -> List[PerformanceRecord]:
    """Cached scorecards in the context's active order."""
    if context.last_performance is None:
        raise AnalysisValidationError(
            ValidationCode.NO_ANALYSIS, "先にパフォーマンス分析を実行してください"
        )
    return sort_performance(context.last_performance, context.performance_sort)


def resort_performance(
    context: AnalysisContext,
    key: str,
    direction: Optional[SortDirection] = None,
) -> Tuple[AnalysisContext, List[PerformanceRecord]]:
    """Sort cached scorecards; a new key starts descending. Ties keep staff order."""
    if context.last_performance is None:
        raise AnalysisValidationError(
            ValidationCode.NO_ANALYSIS, "先にパフォーマンス分析を実行してください"
        )
    state = (
        SortState(key, direction) if direction
        else context.performance_sort.toggle(key, first_direction=SortDirection.DESC)
    )
    rows = sort_performance(context.last_performance, state)
    return replace(context, performance_sort=state), rows
