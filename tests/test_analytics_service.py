"""
Tests for the analytics service facade.
"""

from datetime import date

import pytest

from config import Settings
from progress_panel.analytics import (
    AnalysisValidationError,
    FilterCriteria,
    PeriodPreset,
    SortDirection,
    SortState,
    performance_rows,
)
from progress_panel.data_access import InMemoryDataSource
from progress_panel.services import (
    AnalyticsService,
    get_analytics_service,
    set_analytics_service,
)


class CountingSource(InMemoryDataSource):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fetches = 0

    async def get_clients(self):
        self.fetches += 1
        return await super().get_clients()


@pytest.fixture
def spring():
    return FilterCriteria(start_period="2024-04", end_period="2024-05")


class TestProgress:
    """Test progress analysis through the service."""

    @pytest.mark.asyncio
    async def test_analyze_progress(self, analytics_service, spring):
        context = await analytics_service.analyze_progress(spring)
        assert context.last_result.summary.progress_rate == 73

    @pytest.mark.asyncio
    async def test_invalid_criteria_skips_fetch(self, client_rows, settings):
        source = CountingSource(client_rows)
        service = AnalyticsService(source, settings)
        with pytest.raises(AnalysisValidationError):
            await service.analyze_progress(FilterCriteria(start_period="2024-05", end_period="2024-04"))
        assert source.fetches == 0

    @pytest.mark.asyncio
    async def test_sort_does_not_refetch(self, client_rows, staff_rows, task_rows, settings, spring):
        source = CountingSource(client_rows, staff_rows, task_rows)
        service = AnalyticsService(source, settings)
        context = await service.analyze_progress(spring)
        context, rows = service.sort_progress(context, "name")
        context, rows = service.sort_progress(context, "name")
        assert source.fetches == 1
        assert context.matrix_sort.direction == SortDirection.DESC

    @pytest.mark.asyncio
    async def test_threshold_from_settings(self, data_source, spring):
        service = AnalyticsService(data_source, Settings(attention_rate_threshold=80))
        context = await service.analyze_progress(spring)
        names = [c.name for c in context.last_result.summary.attention_clients]
        assert names == ["青木商店", "井上工務店"]


class TestPerformance:
    """Test performance analysis through the service."""

    @pytest.mark.asyncio
    async def test_custom_period(self, analytics_service):
        context = await analytics_service.analyze_performance(
            PeriodPreset.CUSTOM, start="2024-04", end="2024-05"
        )
        assert [r.staff_name for r in performance_rows(context)] == ["鈴木", "佐藤", "高橋"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("preset,start,end", [
        ("forever", None, None),
        ("custom", "2024-05", "2024-04"),
        ("custom", "2024-05", None),
    ])
    async def test_invalid_period_skips_fetch(self, client_rows, settings, preset, start, end):
        source = CountingSource(client_rows)
        service = AnalyticsService(source, settings)
        with pytest.raises(AnalysisValidationError):
            await service.analyze_performance(preset, start=start, end=end)
        assert source.fetches == 0

    @pytest.mark.asyncio
    async def test_default_preset(self, analytics_service, today):
        context = await analytics_service.analyze_performance(today=today)
        assert context.performance_period.to_dict() == {"start": "2023-07", "end": "2024-06"}

    @pytest.mark.asyncio
    async def test_sort_performance(self, analytics_service, today):
        context = await analytics_service.analyze_performance(today=today)
        context, records = analytics_service.sort_performance(context, "name", SortDirection.ASC)
        assert context.performance_sort == SortState("name", SortDirection.ASC)
        assert len(records) == 3


class TestClientList:
    """Test the client list through the service."""

    @pytest.mark.asyncio
    async def test_default_order(self, analytics_service, today):
        entries = await analytics_service.client_list(today=today)
        assert [e.client.id for e in entries] == [102, 101, 103]

    @pytest.mark.asyncio
    async def test_include_inactive(self, analytics_service, today):
        entries = await analytics_service.client_list(today=today, include_inactive=True)
        assert [e.client.id for e in entries] == [104, 102, 101, 103]

    @pytest.mark.asyncio
    async def test_search_by_staff_name(self, analytics_service, today):
        entries = await analytics_service.client_list(today=today, search="佐藤")
        assert sorted(e.client.id for e in entries) == [101, 102]

    @pytest.mark.asyncio
    async def test_staff_and_fiscal_filters(self, analytics_service, today):
        entries = await analytics_service.client_list(today=today, staff_id="1", fiscal_month=3)
        assert [e.client.id for e in entries] == [101]


class TestPeriodsAndSingleton:
    """Test period options and the global service."""

    def test_periods(self, analytics_service, today):
        periods = analytics_service.periods(today)
        assert len(periods["options"]) == 25
        assert periods["default"] == {"start": "2023-07", "end": "2024-06"}

    def test_periods_follow_settings(self, data_source, today):
        service = AnalyticsService(data_source, Settings(default_period_months=6, period_options_months=3))
        periods = service.periods(today)
        assert len(periods["options"]) == 4
        assert periods["default"] == {"start": "2024-01", "end": "2024-06"}

    def test_singleton(self, analytics_service):
        assert get_analytics_service() is get_analytics_service()
        set_analytics_service(analytics_service)
        assert get_analytics_service() is analytics_service

    @pytest.mark.asyncio
    async def test_default_service_is_empty(self):
        context = await get_analytics_service().analyze_progress(
            FilterCriteria(start_period="2024-04", end_period="2024-04")
        )
        assert context.last_result.matrix == []
