import logging
import math
from typing import Sequence

from .constants import MIN_SPRINTS_FOR_TREND
from .stats import coefficient_of_variation, std_dev
from .types import SeriesTrend, SprintRecord, TrendResult, TrendSummary
from .windowing import chronological_window

logger = logging.getLogger(__name__)


def compute_trend(series: Sequence[float]) -> TrendResult:
    """
    Ordinary least squares slope of ``series`` against its index.

    The series must be in chronological order (index 0 is the oldest value).
    Degenerate input (fewer than two points, or a NaN result) gives slope 0.
    """
    n = len(series)
    if n < MIN_SPRINTS_FOR_TREND:
        return TrendResult(slope=0.0)

    sum_x = sum_y = sum_xy = sum_xx = 0.0
    for x, y in enumerate(series):
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_xx += x * x

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return TrendResult(slope=0.0)

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    if math.isnan(slope):
        return TrendResult(slope=0.0)
    return TrendResult(slope=slope)


def compute_consistency(series: Sequence[float]) -> float:
    """
    Consistency score in [0, 1]: ``max(0, 1 - coefficient of variation)``.

    Series shorter than two values are trivially consistent.
    """
    if len(series) < 2:
        return 1.0
    # an all-zero series has no spread, anything else around a zero mean is unbounded
    when_zero_mean = 0.0 if std_dev(series) == 0 else 1.0
    return max(0.0, 1 - coefficient_of_variation(series, when_zero_mean=when_zero_mean))


def _series_trend(series: Sequence[float]) -> SeriesTrend:
    return SeriesTrend(
        slope=compute_trend(series).slope,
        consistency=compute_consistency(series),
    )


def analyze_trends(records: Sequence[SprintRecord], window_size: int) -> TrendSummary:
    """Fit velocity, completion ratio and availability trends over the trend window."""

    window = chronological_window(records, window_size)
    summary = TrendSummary(
        sprints_analyzed=len(window),
        velocity=_series_trend([record.velocity for record in window]),
        completion_ratio=_series_trend([record.completion_ratio for record in window]),
        team_availability=_series_trend([record.team_availability for record in window]),
    )
    logger.debug("Trend summary over %d sprints: %s", len(window), summary)
    return summary
