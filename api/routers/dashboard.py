"""Dashboard router for AdBoard.

This module provides the chart data behind each dashboard tab:
- Time-bucketed spend/deposit/message/turnover metrics by team or operator
- The list of tabs (product verticals) and their teams
"""

import logging
from dataclasses import asdict
from datetime import date, datetime
from typing import Mapping, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_report_service, get_vertical_teams
from api.schemas.dashboard import (
    ChartsResponse,
    MetricSetResponse,
    PeriodBucketResponse,
    VerticalResponse,
    VerticalsResponse,
)
from services import Granularity, GroupBy, ReportAggregationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


def _parse_date(value: str, name: str) -> date:
    """Parse an ISO date or datetime query parameter to a local date."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value!r} is not an ISO date")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.date()


@router.get("/charts", response_model=ChartsResponse)
async def get_chart_data(
    start_date: Optional[str] = Query(None, alias="startDate", description="Start date (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="End date (YYYY-MM-DD)"),
    tab: Optional[str] = Query(None, description="lottery | baccarat | horse-racing | football-area"),
    view: str = Query("team", description="team | adser"),
    period: str = Query("daily", description="daily | monthly"),
    service: ReportAggregationService = Depends(get_report_service),
):
    """Get the chart series for a dashboard tab.

    Returns one entry per day (or per month) in the range up to today, each
    holding cpm, cost per deposit, deposit amount and dollar-per-cover for
    every team of the tab, or for every operator active in it.
    """
    if not start_date or not end_date or not tab:
        raise HTTPException(
            status_code=400,
            detail="Missing required parameters: startDate, endDate, tab",
        )

    try:
        group_by = GroupBy(view)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid view: {view!r} (expected team or adser)")
    try:
        granularity = Granularity(period)
    except ValueError:
        raise HTTPException(
            status_code=400, detail=f"Invalid period: {period!r} (expected daily or monthly)"
        )

    start = _parse_date(start_date, "startDate")
    end = _parse_date(end_date, "endDate")

    try:
        buckets = await service.generate_report(start, end, tab, group_by, granularity)
    except Exception:
        logger.exception(f"Chart data generation failed for tab={tab} {start}..{end}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return ChartsResponse(
        success=True,
        data=[
            PeriodBucketResponse(
                period=b.label,
                date=b.date,
                metrics={key: MetricSetResponse(**asdict(m)) for key, m in b.metrics.items()},
            )
            for b in buckets
        ],
        period=granularity.value,
        view=group_by.value,
    )


@router.get("/tabs", response_model=VerticalsResponse)
async def list_tabs(
    verticals: Mapping[str, tuple[str, ...]] = Depends(get_vertical_teams),
):
    """List the dashboard tabs and the teams each one covers."""
    return VerticalsResponse(
        tabs=[VerticalResponse(tab=tab, teams=list(teams)) for tab, teams in verticals.items()]
    )
