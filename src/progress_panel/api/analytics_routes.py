"""
Analytics Routes

API endpoints for progress analysis, staff performance and the client
list. HTTP is stateless, so a sort request carries its criteria and
the analysis is recomputed before ordering.
"""

from datetime import date
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from ..analytics import (
    FilterCriteria,
    PeriodPreset,
    SortDirection,
    SortState,
    performance_rows,
    progress_color,
)
from ..services import AnalyticsService, get_analytics_service
from .common import format_success_response

logger = logging.getLogger(__name__)

analytics_router = APIRouter(prefix="/analytics", tags=["Analytics"])


# =============================================================================
# REQUEST MODELS
# =============================================================================

class ProgressSortRequest(BaseModel):
    """Request to sort the progress matrix."""
    model_config = ConfigDict(populate_by_name=True)

    criteria: FilterCriteria
    key: str = Field(..., min_length=1, description="name, progress, staff, fiscal-month, completed, total or month-YYYY-MM")
    direction: SortDirection = Field(SortDirection.ASC)


class PerformanceRequest(BaseModel):
    """Request for staff performance scorecards."""
    preset: PeriodPreset = Field(PeriodPreset.LAST_12_MONTHS)
    start: Optional[str] = Field(None, description="Custom period start, YYYY-MM")
    end: Optional[str] = Field(None, description="Custom period end, YYYY-MM")
    sort: Optional[str] = Field(None, description="name, client-count, avg-completion, completed-months, delayed-months")
    direction: SortDirection = Field(SortDirection.DESC)
    today: Optional[date] = Field(None, description="Reference day for presets (defaults to today)")


def _progress_payload(result, rows) -> dict:
    matrix = []
    for row in rows:
        data = row.to_dict()
        data["progressColor"] = progress_color(row.progress_rate)
        matrix.append(data)
    return {
        "period": {
            "startPeriod": result.criteria.start_period,
            "endPeriod": result.criteria.end_period,
        },
        "months": list(result.months),
        "summary": result.summary.to_dict(),
        "matrix": matrix,
    }


# =============================================================================
# PROGRESS
# =============================================================================

@analytics_router.post("/progress")
async def analyze_progress(
    criteria: FilterCriteria,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Summary, attention list and progress matrix for the criteria."""
    context = await service.analyze_progress(criteria)
    result = context.last_result
    return format_success_response(_progress_payload(result, result.matrix))


@analytics_router.post("/progress/sort")
async def sort_progress(
    request: ProgressSortRequest,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Progress matrix ordered by one column."""
    context = await service.analyze_progress(request.criteria)
    context, rows = service.sort_progress(context, request.key, request.direction)
    payload = _progress_payload(context.last_result, rows)
    payload["sort"] = context.matrix_sort.to_dict()
    return format_success_response(payload)


# =============================================================================
# PERFORMANCE
# =============================================================================

@analytics_router.post("/performance")
async def analyze_performance(
    request: PerformanceRequest,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Per-staff scorecards, by average completion rate unless sort is given."""
    context = await service.analyze_performance(
        preset=request.preset,
        start=request.start,
        end=request.end,
        today=request.today,
    )
    records = performance_rows(context)
    if request.sort:
        context, records = service.sort_performance(context, request.sort, request.direction)

    return format_success_response({
        "period": context.performance_period.to_dict(),
        "sort": context.performance_sort.to_dict(),
        "staff": [record.to_dict() for record in records],
    })


# =============================================================================
# PERIODS & CLIENT LIST
# =============================================================================

@analytics_router.get("/periods")
async def get_periods(
    today: Optional[date] = Query(None, description="Reference day (defaults to today)"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Selectable months and the default analysis period."""
    return format_success_response(service.periods(today))


@analytics_router.get("/clients")
async def get_client_list(
    search: Optional[str] = Query(None, description="Match client or staff name"),
    staff_id: Optional[str] = Query(None, description="Staff ID"),
    fiscal_month: Optional[int] = Query(None, ge=1, le=12, description="Fiscal month"),
    include_inactive: bool = Query(False, description="Also list inactive and deleted clients"),
    sort: Optional[str] = Query(None, description="Sort key (default fiscal_month)"),
    direction: SortDirection = Query(SortDirection.ASC),
    today: Optional[date] = Query(None, description="Reference day (defaults to today)"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Client list with unattended months, in fiscal-month rolling order by default."""
    entries = await service.client_list(
        today=today,
        search=search,
        staff_id=staff_id,
        fiscal_month=fiscal_month,
        include_inactive=include_inactive,
        sort=SortState(key=sort, direction=direction) if sort else None,
    )
    return format_success_response({
        "clients": [entry.to_dict() for entry in entries],
        "count": len(entries),
    })


@analytics_router.get("/health")
async def analytics_health_check():
    """Analytics module health check endpoint."""
    return {
        "status": "healthy",
        "module": "progress_panel.analytics",
    }
