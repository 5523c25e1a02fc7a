"""
Descriptive statistics helpers.

All helpers use population (ddof=0) statistics and return 0.0 on empty input
instead of NaN, so they are safe on sparse order books.
"""

from collections.abc import Sequence

import numpy as np


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def median(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.median(values))


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation."""
    if len(values) == 0:
        return 0.0
    return float(np.std(values, ddof=0))


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient.

    Returns 0.0 for mismatched lengths or when either series is constant.
    """
    if len(x) != len(y) or len(x) < 2:
        return 0.0

    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    n = len(x_arr)

    numerator = n * np.sum(x_arr * y_arr) - np.sum(x_arr) * np.sum(y_arr)
    denominator = np.sqrt(
        (n * np.sum(x_arr**2) - np.sum(x_arr) ** 2)
        * (n * np.sum(y_arr**2) - np.sum(y_arr) ** 2)
    )
    if denominator == 0:
        return 0.0
    return float(numerator / denominator)


def naive_errors(values: Sequence[float], start: int) -> np.ndarray:
    """
    Signed one-step-ahead errors of the naive (last value) forecast.

    Error at position i is ``values[i] - values[i - 1]`` for i >= start.
    """
    arr = np.asarray(values, dtype=float)
    start = max(start, 1)
    if len(arr) <= start:
        return np.array([], dtype=float)
    return arr[start:] - arr[start - 1 : -1]
