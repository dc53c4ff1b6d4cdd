from typing import List, Optional, Sequence
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel

from ..analytics import (
    ForecastResult,
    MetricsResult,
    PlanningOptions,
    Recommendation,
    SprintRecord,
    TrendSummary,
    analyze_trends,
    compute_forecast,
    compute_metrics,
    generate_recommendations,
    historical_availability,
    planning_options,
)
from ..config import settings
from ..utils.logging import get_logger
from .sprint_service import SprintService

logger = get_logger(__name__)


class ForecastReport(BaseModel):
    forecast: ForecastResult
    planning_options: PlanningOptions
    next_availability: float
    average_availability: float


class DashboardReport(BaseModel):
    recent_sprints: int
    trend_sprints: int
    metrics: MetricsResult
    forecast: ForecastReport
    trends: TrendSummary
    recommendations: List[Recommendation]
    generated_at: datetime


def clamp_window(requested: Optional[int], total: int, default: int) -> int:
    """
    Bound a requested window size to the configured range, then to the
    number of available sprints.
    """
    size = default if requested is None else requested
    size = max(settings.min_window_size, min(size, settings.max_window_size))
    return min(size, total)


class AnalyticsService:
    """Runs the analytics core against one snapshot of the sprint store."""

    def __init__(self, db: AsyncSession) -> None:
        self.sprints = SprintService(db)

    async def get_metrics(self, window: Optional[int] = None) -> MetricsResult:
        records = await self.sprints.snapshot()
        size = clamp_window(window, len(records), settings.default_recent_sprints)
        return compute_metrics(records, size)

    async def get_forecast(
        self,
        window: Optional[int] = None,
        next_availability: Optional[float] = None,
    ) -> ForecastReport:
        records = await self.sprints.snapshot()
        size = clamp_window(window, len(records), settings.default_recent_sprints)
        return self._forecast(records, size, self._next_availability(next_availability))

    async def get_trends(self, trend_window: Optional[int] = None) -> TrendSummary:
        records = await self.sprints.snapshot()
        size = clamp_window(trend_window, len(records), settings.default_trend_sprints)
        return analyze_trends(records, size)

    async def get_recommendations(
        self,
        window: Optional[int] = None,
        trend_window: Optional[int] = None,
        next_availability: Optional[float] = None,
    ) -> List[Recommendation]:
        records = await self.sprints.snapshot()
        recent_size = clamp_window(window, len(records), settings.default_recent_sprints)
        trend_size = clamp_window(trend_window, len(records), settings.default_trend_sprints)
        availability = self._next_availability(next_availability)

        report = self._forecast(records, recent_size, availability)
        return generate_recommendations(
            records,
            trend_size,
            availability,
            report.average_availability,
            report.forecast,
        )

    async def get_dashboard(
        self,
        window: Optional[int] = None,
        trend_window: Optional[int] = None,
        next_availability: Optional[float] = None,
    ) -> DashboardReport:
        """Metrics, forecast, trends and recommendations from a single snapshot."""

        records = await self.sprints.snapshot()
        recent_size = clamp_window(window, len(records), settings.default_recent_sprints)
        trend_size = clamp_window(trend_window, len(records), settings.default_trend_sprints)
        availability = self._next_availability(next_availability)

        forecast = self._forecast(records, recent_size, availability)
        recommendations = generate_recommendations(
            records,
            trend_size,
            availability,
            forecast.average_availability,
            forecast.forecast,
        )

        logger.info(
            "Dashboard for %d sprints (window=%d, trend window=%d, availability=%.1f)",
            len(records), recent_size, trend_size, availability,
        )

        return DashboardReport(
            recent_sprints=recent_size,
            trend_sprints=trend_size,
            metrics=compute_metrics(records, recent_size),
            forecast=forecast,
            trends=analyze_trends(records, trend_size),
            recommendations=recommendations,
            generated_at=datetime.now(timezone.utc),
        )

    # Private methods

    def _next_availability(self, requested: Optional[float]) -> float:
        if requested is None:
            return settings.default_next_availability
        return requested

    def _forecast(
        self,
        records: Sequence[SprintRecord],
        window: int,
        next_availability: float,
    ) -> ForecastReport:
        forecast = compute_forecast(records, window, next_availability)
        # with no history there is nothing to compare the projection against
        average = historical_availability(records, window) if records else next_availability
        return ForecastReport(
            forecast=forecast,
            planning_options=planning_options(forecast),
            next_availability=next_availability,
            average_availability=average,
        )
