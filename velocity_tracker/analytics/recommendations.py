"""
Rule based planning advice.

Rules are evaluated in a fixed order and each appends at most one
recommendation, so the output order is stable. Only the trend rules are
skipped when the trend window holds too few sprints.
"""

import logging
from typing import List, Sequence

from . import constants as c
from .stats import round_half_up
from .trends import compute_consistency, compute_trend
from .types import ForecastResult, Recommendation, RecommendationKind, SprintRecord
from .windowing import chronological_window

logger = logging.getLogger(__name__)


def _success(title: str, message: str) -> Recommendation:
    return Recommendation(kind=RecommendationKind.SUCCESS, title=title, message=message)


def _warning(title: str, message: str) -> Recommendation:
    return Recommendation(kind=RecommendationKind.WARNING, title=title, message=message)


def _info(title: str, message: str) -> Recommendation:
    return Recommendation(kind=RecommendationKind.INFO, title=title, message=message)


def _trend_recommendations(window: Sequence[SprintRecord]) -> List[Recommendation]:
    recommendations: List[Recommendation] = []
    count = len(window)

    velocities = [record.velocity for record in window]
    ratios = [record.completion_ratio for record in window]
    availabilities = [record.team_availability for record in window]

    velocity_slope = compute_trend(velocities).slope
    if velocity_slope > c.VELOCITY_SLOPE_THRESHOLD:
        recommendations.append(_success(
            "Improving Velocity",
            f"Velocity is trending upward by {velocity_slope:.1f} points per sprint. Great progress!",
        ))
    elif velocity_slope < -c.VELOCITY_SLOPE_THRESHOLD:
        recommendations.append(_warning(
            "Declining Velocity",
            f"Velocity is trending downward by {abs(velocity_slope):.1f} points per sprint. "
            "Consider investigating potential blockers.",
        ))

    completion_slope = compute_trend(ratios).slope
    if completion_slope > c.COMPLETION_SLOPE_THRESHOLD:
        recommendations.append(_success(
            "Improving Completion Rate",
            f"Completion rate is rising by {completion_slope:.1f}% per sprint.",
        ))
    elif completion_slope < -c.COMPLETION_SLOPE_THRESHOLD:
        recommendations.append(_warning(
            "Declining Completion Rate",
            f"Completion rate is falling by {abs(completion_slope):.1f}% per sprint. "
            "Review scope changes and estimation accuracy.",
        ))

    availability_slope = compute_trend(availabilities).slope
    if availability_slope < -c.AVAILABILITY_SLOPE_THRESHOLD:
        recommendations.append(_warning(
            "Declining Availability",
            f"Team availability is dropping by {abs(availability_slope):.1f}% per sprint. "
            "Plan for reduced capacity.",
        ))

    velocity_consistency = compute_consistency(velocities)
    if velocity_consistency < c.VELOCITY_CONSISTENCY_THRESHOLD:
        recommendations.append(_warning(
            "Inconsistent Velocity",
            f"Velocity consistency is {velocity_consistency * 100:.1f}%. "
            "Consider analyzing what causes these variations.",
        ))

    completion_consistency = compute_consistency(ratios)
    if completion_consistency < c.COMPLETION_CONSISTENCY_THRESHOLD:
        recommendations.append(_info(
            "Variable Completion Rate",
            f"Completion rate consistency is {completion_consistency * 100:.1f}%. "
            "More predictable commitments will improve forecasts.",
        ))

    below_target = sum(1 for ratio in ratios if ratio < c.OVERCOMMIT_COMPLETION_RATIO)
    if below_target > count * c.OVERCOMMIT_SHARE:
        recommendations.append(_warning(
            "Possible Overcommitment",
            f"{below_target} of {count} recent sprints completed less than "
            f"{c.OVERCOMMIT_COMPLETION_RATIO:.0f}% of planned points. "
            "Consider planning slightly fewer points.",
        ))

    fully_done = sum(1 for ratio in ratios if ratio >= c.UNDERUTILIZED_COMPLETION_RATIO)
    if fully_done > count * c.UNDERUTILIZED_SHARE:
        recommendations.append(_info(
            "Room for More Work",
            f"{fully_done} of {count} recent sprints completed all planned points. "
            "The team may be able to commit to more.",
        ))

    return recommendations


def generate_recommendations(
    records: Sequence[SprintRecord],
    trend_window_size: int,
    next_availability: float,
    average_availability: float,
    forecast: ForecastResult,
) -> List[Recommendation]:
    """
    Apply the recommendation rules to the current sprint snapshot.

    Args:
        records: Full sprint collection, any order
        trend_window_size: Number of most recent sprints to analyze for trends
        next_availability: Projected team availability for the next sprint (0-100)
        average_availability: Historical mean availability to compare against
        forecast: Forecast computed for the same snapshot

    Returns:
        Recommendations in rule evaluation order
    """

    window = chronological_window(records, trend_window_size)
    count = len(window)
    recommendations: List[Recommendation] = []

    if count < c.MIN_SPRINTS_FOR_TREND:
        recommendations.append(_info(
            "Insufficient Trend Data",
            f"At least {c.MIN_SPRINTS_FOR_TREND} sprints are needed to analyze trends "
            f"({count} available).",
        ))
    else:
        recommendations.extend(_trend_recommendations(window))

    availability_gap = average_availability - next_availability
    if availability_gap > c.AVAILABILITY_DELTA_THRESHOLD:
        reduction = round_half_up(availability_gap * c.AVAILABILITY_POINT_REDUCTION_FACTOR)
        recommendations.append(_warning(
            "Reduced Availability",
            f"Next sprint availability ({next_availability:.1f}%) is {availability_gap:.1f} points "
            f"below the team average ({average_availability:.1f}%). "
            f"Consider planning about {reduction} fewer points.",
        ))
    elif -availability_gap > c.AVAILABILITY_DELTA_THRESHOLD:
        recommendations.append(_success(
            "Increased Availability",
            f"Next sprint availability ({next_availability:.1f}%) is {-availability_gap:.1f} points "
            f"above the team average ({average_availability:.1f}%). "
            "The team may be able to take on more work.",
        ))

    if next_availability < c.LOW_AVAILABILITY_THRESHOLD:
        recommendations.append(_warning(
            "Low Team Availability",
            f"Only {next_availability:.1f}% of the team is available next sprint. "
            "Prioritize the most important work.",
        ))

    if forecast.confidence_level < c.LOW_CONFIDENCE_THRESHOLD:
        recommendations.append(_warning(
            "Low Confidence",
            f"Forecast confidence is {forecast.confidence_level}%. "
            "Velocity or availability varies significantly, treat the forecast as a rough guide.",
        ))

    if count < c.RECOMMENDED_MIN_SPRINTS:
        recommendations.append(_info(
            "More Data Needed",
            f"Only {count} sprints analyzed. Add more sprint data "
            f"(at least {c.RECOMMENDED_MIN_SPRINTS}) for more accurate forecasting.",
        ))

    logger.debug("Generated %d recommendations from %d sprints", len(recommendations), count)
    return recommendations
