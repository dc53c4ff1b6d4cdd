from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Annotated, List, Optional

from ...analytics import MetricsResult, Recommendation, TrendSummary
from ...database import get_db
from ...services.analytics_service import AnalyticsService, DashboardReport, ForecastReport

router = APIRouter()

# Window sizes outside the configured range are clamped by the service
WindowParam = Annotated[Optional[int], Query(ge=1, description="Number of most recent sprints to analyze")]
TrendWindowParam = Annotated[Optional[int], Query(ge=1, description="Number of most recent sprints for trend analysis")]
AvailabilityParam = Annotated[Optional[float], Query(ge=0, le=100, description="Projected team availability (%) for the next sprint")]


@router.get("/metrics", response_model=MetricsResult)
async def get_metrics(
    window: WindowParam = None,
    db: AsyncSession = Depends(get_db)
):
    """Summary statistics over the recent sprints"""

    return await AnalyticsService(db).get_metrics(window)


@router.get("/forecast", response_model=ForecastReport)
async def get_forecast(
    window: WindowParam = None,
    next_availability: AvailabilityParam = None,
    db: AsyncSession = Depends(get_db)
):
    """Next-sprint point forecast with confidence"""

    return await AnalyticsService(db).get_forecast(window, next_availability)


@router.get("/trends", response_model=TrendSummary)
async def get_trends(
    trend_window: TrendWindowParam = None,
    db: AsyncSession = Depends(get_db)
):
    """Velocity, completion and availability trends"""

    return await AnalyticsService(db).get_trends(trend_window)


@router.get("/recommendations", response_model=List[Recommendation])
async def get_recommendations(
    window: WindowParam = None,
    trend_window: TrendWindowParam = None,
    next_availability: AvailabilityParam = None,
    db: AsyncSession = Depends(get_db)
):
    """Planning recommendations"""

    return await AnalyticsService(db).get_recommendations(window, trend_window, next_availability)


@router.get("/dashboard", response_model=DashboardReport)
async def get_dashboard(
    window: WindowParam = None,
    trend_window: TrendWindowParam = None,
    next_availability: AvailabilityParam = None,
    db: AsyncSession = Depends(get_db)
):
    """Everything the dashboard shows, computed from one snapshot"""

    return await AnalyticsService(db).get_dashboard(window, trend_window, next_availability)
