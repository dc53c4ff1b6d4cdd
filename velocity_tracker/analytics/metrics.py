"""
Summary statistics over the recent window of sprints.
"""

import logging
from typing import Sequence

from .stats import mean, round_half_up, std_dev
from .types import MetricsResult, SprintRecord
from .windowing import recent_window

logger = logging.getLogger(__name__)


def weighted_average_velocity(window: Sequence[SprintRecord]) -> float:
    """
    Recency weighted mean velocity of a newest-first window.

    The i-th most recent record (0-indexed) gets weight ``len(window) - i``,
    so the newest sprint weighs the most. Shared by ``predicted_velocity``
    and the forecast.
    """
    size = len(window)
    total_weight = 0
    weighted_sum = 0.0
    for index, record in enumerate(window):
        weight = size - index
        weighted_sum += record.velocity * weight
        total_weight += weight
    return weighted_sum / total_weight if total_weight > 0 else 0.0


def compute_metrics(records: Sequence[SprintRecord], window_size: int) -> MetricsResult:
    """Reduce the most recent ``window_size`` records into summary statistics."""

    window = recent_window(records, window_size)
    if not window:
        return MetricsResult()

    velocities = [record.velocity for record in window]
    ratios = [record.completion_ratio for record in window]
    availabilities = [record.team_availability for record in window]

    result = MetricsResult(
        average_velocity=round_half_up(mean(velocities)),
        average_completion_ratio=round_half_up(mean(ratios)),
        team_availability_consistency=round_half_up(max(0.0, 100 - std_dev(availabilities))),
        predicted_velocity=round_half_up(weighted_average_velocity(window)),
        total_sprints=len(window),
    )
    logger.debug("Metrics over %d sprints: %s", len(window), result)
    return result
