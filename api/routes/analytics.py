"""
Governance analytics endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from core.analytics import AnalyticsRepository, MetricsAggregator, ReportExporter, resolve_query
from core.analytics.exporter import SUPPORTED_FORMATS
from utils.logger import get_logger
from .deps import get_analytics_repository, get_clock

logger = get_logger(__name__)
router = APIRouter(tags=["analytics"])

ANALYTICS_ERROR = "Failed to fetch analytics data"


def _query_from_params(period_days, compare, work_group_id, country, proposal_type, clock):
    return resolve_query(
        period_days=period_days,
        compare=compare,
        work_group_id=work_group_id,
        country=country,
        proposal_type=proposal_type,
        now=clock(),
    )


@router.get("/analytics")
async def get_analytics(
    period_days: Optional[str] = Query(None, alias="periodDays", description="Window length in days"),
    compare: Optional[str] = Query(None, description="Compare with the previous period (1, true, yes)"),
    work_group_id: Optional[str] = Query(None, alias="workGroupId", description="Filter by workgroup"),
    country: Optional[str] = Query(None, description="Filter voters by country"),
    proposal_type: Optional[str] = Query(None, alias="proposalType", description="Filter by proposal type"),
    repository: AnalyticsRepository = Depends(get_analytics_repository),
    clock=Depends(get_clock),
):
    """Get governance, diversity and treasury analytics for a rolling window."""
    try:
        query = _query_from_params(period_days, compare, work_group_id, country, proposal_type, clock)
        return await MetricsAggregator(repository).aggregate(query)
    except Exception as e:
        logger.error(f"Error fetching analytics data: {e}")
        return JSONResponse(status_code=500, content={"error": ANALYTICS_ERROR})


@router.get("/analytics/treasury/export")
async def export_treasury(
    format: str = Query("csv", description="Export format: csv or json"),
    period_days: Optional[str] = Query(None, alias="periodDays", description="Window length in days"),
    work_group_id: Optional[str] = Query(None, alias="workGroupId", description="Filter by workgroup"),
    country: Optional[str] = Query(None, description="Filter voters by country"),
    proposal_type: Optional[str] = Query(None, alias="proposalType", description="Filter by proposal type"),
    repository: AnalyticsRepository = Depends(get_analytics_repository),
    clock=Depends(get_clock),
):
    """Download the per-workgroup treasury breakdown."""
    if format.lower() not in SUPPORTED_FORMATS:
        return JSONResponse(status_code=400, content={"error": f"Unsupported export format: {format}"})

    try:
        query = _query_from_params(period_days, None, work_group_id, country, proposal_type, clock)
        result = await MetricsAggregator(repository).aggregate(query)
        exporter = ReportExporter()
        content = exporter.export_treasury(result["treasury"], format)
        filename = exporter.filename(query.window.period_days, format)
    except Exception as e:
        logger.error(f"Error exporting treasury data: {e}")
        return JSONResponse(status_code=500, content={"error": ANALYTICS_ERROR})

    media_type = "text/csv; charset=utf-8" if format.lower() == "csv" else "application/json"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
