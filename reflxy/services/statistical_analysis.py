"""
Statistical Analysis Utilities

Descriptive statistics used by the pattern insight engine. Samples are small
(a user's 10-20 most recent analyses), so every function here is total:
undefined or uninformative results come back as 0 instead of raising.

Key Features:
- Mean and population standard deviation
- Pearson correlation for continuous variables
- Percentile lookup over sorted values
- Rounding helpers that keep fingerprints stable against numeric jitter
"""

import logging
import math
from typing import Sequence

logger = logging.getLogger(__name__)

# Pearson correlation is reported as 0 below this many paired points
MIN_CORRELATION_POINTS = 3


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp value into [low, high]"""
    return min(max(value, low), high)


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, with halves going up (2.5 -> 3, -2.5 -> -2).

    Python's round() uses banker's rounding, which would make fingerprints and
    risk projections flip between neighbouring values on exact halves.
    """
    return math.floor(value + 0.5)


def round_to_nearest(value: float, step: float) -> float:
    """
    Round value to the nearest multiple of step.

    Example:
        >>> round_to_nearest(17, 5)
        15
        >>> round_to_nearest(9.1, 2)
        10
    """
    return round_half_up(value / step) * step


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0 for empty input"""
    if not values:
        return 0.0
    return sum(values) / len(values)


def std_dev(values: Sequence[float]) -> float:
    """
    Population standard deviation (divides by n, not n - 1).

    Returns 0 for empty input.
    """
    if not values:
        return 0.0
    avg = mean(values)
    variance = sum((value - avg) ** 2 for value in values) / len(values)
    return math.sqrt(variance)


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Calculate the Pearson correlation coefficient.

    This measures linear correlation between two continuous variables
    (e.g., message word count and warmth score).

    Args:
        x: First variable values
        y: Second variable values

    Returns:
        r value between -1 and 1. Returns 0 when the lengths differ, when
        there are fewer than 3 points, or when either variable has no
        variation.

    Example:
        >>> words = [12, 40, 85, 130]
        >>> warmth = [80, 72, 55, 41]
        >>> r = pearson_correlation(words, warmth)
        >>> print(f"r = {r:.3f}")
    """
    if len(x) != len(y) or len(x) < MIN_CORRELATION_POINTS:
        return 0.0

    n = len(x)
    mean_x = mean(x)
    mean_y = mean(y)

    covariance = 0.0
    sum_sq_x = 0.0
    sum_sq_y = 0.0
    for i in range(n):
        dx = x[i] - mean_x
        dy = y[i] - mean_y
        covariance += dx * dy
        sum_sq_x += dx ** 2
        sum_sq_y += dy ** 2

    denominator = math.sqrt(sum_sq_x * sum_sq_y)
    if denominator == 0:
        # No variation in one of the variables
        return 0.0

    return covariance / denominator


def percentile(values: Sequence[float], p: float) -> float:
    """
    Value at fraction p of the ascending-sorted input.

    Uses the lower index floor(p * (n - 1)) without interpolation, clamped
    to valid bounds. Returns 0 for empty input.

    Example:
        >>> percentile([40, 10, 30, 20], 0.75)
        30
    """
    if not values:
        return 0
    ordered = sorted(values)
    index = int(clamp(math.floor(p * (len(ordered) - 1)), 0, len(ordered) - 1))
    return ordered[index]
