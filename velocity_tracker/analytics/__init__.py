"""
Sprint velocity analytics.

Pure calculations over immutable sprint snapshots:
- Windowing of the most recent sprints
- Summary metrics and recency weighted velocity
- Next-sprint forecast with confidence score
- Linear trend and consistency analysis
- Rule based planning recommendations
- Team availability from per-member days
"""

from .availability import calculate_team_availability, calculate_team_capacity
from .forecast import compute_forecast, historical_availability, planning_options
from .metrics import compute_metrics, weighted_average_velocity
from .recommendations import generate_recommendations
from .trends import analyze_trends, compute_consistency, compute_trend
from .types import (
    ForecastResult,
    MetricsResult,
    PlanningOptions,
    Recommendation,
    RecommendationKind,
    SeriesTrend,
    SprintRecord,
    TeamAvailability,
    TeamMember,
    TrendResult,
    TrendSummary,
)
from .windowing import chronological_window, recent_window

__all__ = [
    "analyze_trends",
    "calculate_team_availability",
    "calculate_team_capacity",
    "chronological_window",
    "compute_consistency",
    "compute_forecast",
    "compute_metrics",
    "compute_trend",
    "generate_recommendations",
    "historical_availability",
    "planning_options",
    "recent_window",
    "weighted_average_velocity",
    "ForecastResult",
    "MetricsResult",
    "PlanningOptions",
    "Recommendation",
    "RecommendationKind",
    "SeriesTrend",
    "SprintRecord",
    "TeamAvailability",
    "TeamMember",
    "TrendResult",
    "TrendSummary",
]
