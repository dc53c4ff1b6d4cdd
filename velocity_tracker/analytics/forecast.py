"""
Next-sprint forecast.

The forecast is the recency weighted velocity of the recent window scaled
by the projected team availability. Its confidence starts from how steady
velocity has been and is then dampened twice:

- by how far the projected availability departs from the historical mean;
- by how much availability itself has varied across the window.

A team that is usually 90% available but claims 100% next sprint therefore
gets lower confidence than one claiming its usual 90%.
"""

import logging
from typing import Sequence

from .constants import (
    AGGRESSIVE_PLANNING_FACTOR,
    AVAILABILITY_DIFFERENCE_DAMPENING,
    AVAILABILITY_VARIATION_DAMPENING,
    CONSERVATIVE_PLANNING_FACTOR,
    MIN_SPRINTS_FOR_FORECAST,
)
from .metrics import weighted_average_velocity
from .stats import clamp, coefficient_of_variation, mean, round_half_up
from .types import ForecastResult, PlanningOptions, SprintRecord
from .windowing import recent_window

logger = logging.getLogger(__name__)


def historical_availability(records: Sequence[SprintRecord], window_size: int) -> float:
    """Mean team availability over the recent window (0 when empty)."""
    return mean([record.team_availability for record in recent_window(records, window_size)])


def compute_forecast(
    records: Sequence[SprintRecord],
    window_size: int,
    next_availability: float,
) -> ForecastResult:
    """
    Forecast the points to plan for the next sprint.

    Args:
        records: Full sprint collection, any order
        window_size: Number of most recent sprints to base the forecast on
        next_availability: Projected team availability for the next sprint (0-100)

    Returns:
        ForecastResult with recommended points, confidence (0-100) and the
        number of sprints used
    """

    total = len(records)
    if total < MIN_SPRINTS_FOR_FORECAST:
        average = mean([record.velocity for record in records])
        return ForecastResult(
            recommended_planning=max(0, round_half_up(average)),
            confidence_level=0,
            based_on_sprints=total,
        )

    window = recent_window(records, window_size)
    velocities = [record.velocity for record in window]
    availabilities = [record.team_availability for record in window]

    adjusted_forecast = weighted_average_velocity(window) * (next_availability / 100)

    velocity_cov = coefficient_of_variation(velocities, when_zero_mean=1.0)
    base_confidence = clamp((1 - velocity_cov) * 100, 0, 100)

    avg_availability = mean(availabilities)
    availability_cov = coefficient_of_variation(availabilities, when_zero_mean=0.0)
    availability_difference = abs(next_availability - avg_availability) / 100

    confidence = clamp(
        base_confidence
        * (1 - availability_difference * AVAILABILITY_DIFFERENCE_DAMPENING)
        * (1 - availability_cov * AVAILABILITY_VARIATION_DAMPENING),
        0,
        100,
    )

    result = ForecastResult(
        recommended_planning=max(0, round_half_up(adjusted_forecast)),
        confidence_level=round_half_up(confidence),
        based_on_sprints=len(window),
    )
    logger.debug(
        "Forecast from %d sprints at %.1f%% availability: %s",
        len(window), next_availability, result,
    )
    return result


def planning_options(forecast: ForecastResult) -> PlanningOptions:
    """Conservative, recommended and aggressive point targets around a forecast."""
    recommended = forecast.recommended_planning
    return PlanningOptions(
        conservative=round_half_up(recommended * CONSERVATIVE_PLANNING_FACTOR),
        recommended=recommended,
        aggressive=round_half_up(recommended * AGGRESSIVE_PLANNING_FACTOR),
    )
