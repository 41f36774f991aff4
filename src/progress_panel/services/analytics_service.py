"""
Analytics Service

Facade over the analytics engine for the API layer and other callers.

Loads a fresh snapshot from the data source for every analysis and
keeps results only inside the AnalysisContext it hands back; sorting a
context's cached result never re-fetches.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union

from config import Settings, get_settings

from ..analytics import (
    AnalysisContext,
    ClientListEntry,
    ClientMatrixRow,
    FilterCriteria,
    PerformanceRecord,
    PeriodPreset,
    SortDirection,
    SortState,
    build_client_list,
    default_period,
    filter_client_list,
    period_options,
    resolve_period,
    resort_matrix,
    resort_performance,
    run_performance_analysis,
    run_progress_analysis,
    sort_client_list,
)
from ..analytics.filters import validate_criteria
from ..data_access import DataSource, InMemoryDataSource, load_snapshot

logger = logging.getLogger(__name__)


class AnalyticsService:
    """
    Service for progress and performance analysis.

    Provides:
    - Progress analysis (summary, attention list, progress matrix)
    - Performance scorecards per staff member
    - Re-sorting of cached results
    - The client list with backlog figures in fiscal-month order
    - Period options for pickers
    """

    def __init__(self, source: DataSource, settings: Optional[Settings] = None):
        self._source = source
        self._settings = settings or get_settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    # =========================================================================
    # PROGRESS
    # =========================================================================

    async def analyze_progress(
        self,
        criteria: FilterCriteria,
        context: Optional[AnalysisContext] = None,
    ) -> AnalysisContext:
        """
        Run a progress analysis and return a context holding the result.

        Raises:
            AnalysisValidationError: invalid criteria; nothing is fetched
        """
        validate_criteria(criteria)
        snapshot = await load_snapshot(self._source)
        return run_progress_analysis(
            context or AnalysisContext(),
            criteria,
            snapshot.clients,
            snapshot.staffs,
            snapshot.monthly_tasks,
            rate_threshold=self._settings.attention_rate_threshold,
        )

    def sort_progress(
        self,
        context: AnalysisContext,
        key: str,
        direction: Optional[SortDirection] = None,
    ) -> Tuple[AnalysisContext, List[ClientMatrixRow]]:
        """Re-sort the cached matrix of a context."""
        return resort_matrix(context, key, direction)

    # =========================================================================
    # PERFORMANCE
    # =========================================================================

    async def analyze_performance(
        self,
        preset: Union[PeriodPreset, str] = PeriodPreset.LAST_12_MONTHS,
        start: Optional[str] = None,
        end: Optional[str] = None,
        today: Optional[date] = None,
        context: Optional[AnalysisContext] = None,
    ) -> AnalysisContext:
        """
        Scorecards for every staff member.

        Raises:
            AnalysisValidationError: unknown preset or invalid custom
                range; nothing is fetched
        """
        period = resolve_period(preset, start, end, today)
        snapshot = await load_snapshot(self._source)
        return run_performance_analysis(
            context or AnalysisContext(),
            period,
            snapshot.staffs,
            snapshot.clients,
            snapshot.monthly_tasks,
        )

    def sort_performance(
        self,
        context: AnalysisContext,
        key: str,
        direction: Optional[SortDirection] = None,
    ) -> Tuple[AnalysisContext, List[PerformanceRecord]]:
        return resort_performance(context, key, direction)

    # =========================================================================
    # CLIENT LIST & PERIODS
    # =========================================================================

    async def client_list(
        self,
        today: Optional[date] = None,
        search: Optional[str] = None,
        staff_id: Any = None,
        fiscal_month: Optional[int] = None,
        include_inactive: bool = False,
        sort: Optional[SortState] = None,
    ) -> List[ClientListEntry]:
        """Filtered client list with backlog figures, fiscal-month order by default."""
        today = today or date.today()
        snapshot = await load_snapshot(self._source)
        entries = build_client_list(
            snapshot.clients,
            snapshot.staffs,
            snapshot.monthly_tasks,
            today=today,
            yellow_threshold=self._settings.yellow_threshold,
            red_threshold=self._settings.red_threshold,
        )
        staff_names = {str(entry.client.id): entry.staff_name for entry in entries}
        visible = filter_client_list(
            snapshot.clients,
            search=search,
            staff_id=staff_id,
            fiscal_month=fiscal_month,
            include_inactive=include_inactive,
            staff_names=staff_names,
        )
        visible_ids = {id(client) for client in visible}
        entries = [entry for entry in entries if id(entry.client) in visible_ids]
        return sort_client_list(entries, sort, today, self._settings.fiscal_anchor_offset)

    def periods(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Selectable months and the default analysis period."""
        return {
            "options": period_options(today, self._settings.period_options_months),
            "default": default_period(today, self._settings.default_period_months).to_dict(),
        }


# Singleton instance
_analytics_service: Optional[AnalyticsService] = None


def get_analytics_service() -> AnalyticsService:
    """Get the global analytics service instance (empty in-memory source until configured)."""
    global _analytics_service
    if _analytics_service is None:
        _analytics_service = AnalyticsService(InMemoryDataSource())
    return _analytics_service


def set_analytics_service(service: Optional[AnalyticsService]) -> None:
    """Install the global analytics service (None resets it)."""
    global _analytics_service
    _analytics_service = service
