"""Small numeric helpers shared by the analytics modules."""

import math
import statistics
from typing import Sequence


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for an empty sequence."""
    if not values:
        return 0.0
    return statistics.fmean(values)


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation, 0 for an empty sequence."""
    if not values:
        return 0.0
    return statistics.pstdev(values)


def coefficient_of_variation(values: Sequence[float], when_zero_mean: float) -> float:
    """
    Standard deviation divided by the mean.

    ``when_zero_mean`` is returned when the mean is 0 (including the empty
    case), since the ratio is undefined there.
    """
    avg = mean(values)
    if avg == 0:
        return when_zero_mean
    return std_dev(values) / avg
