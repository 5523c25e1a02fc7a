"""
Forecast accuracy backtest.

Scores the naive one-step-ahead forecast (next month equals this month) over
the history. This is the baseline the seasonal forecast is judged against
when the dashboard reports forecast reliability.

    error_t = y_t - y_{t-1}
    MAPE    = (100/n) * sum(|error_t| / y_t)
"""

from collections.abc import Sequence

import numpy as np

from ..config import AnalyticsConfig
from ..domain import AccuracyLevel, AccuracyResult, PeriodSummary
from .aggregation import weights_of
from .statistics import naive_errors


class AccuracyEvaluator:
    """
    Naive backtest over a period history.

    Errors are measured from the fourth period on so every scored point has
    three periods of history behind it.
    """

    ERROR_START = 3

    def __init__(self, config: AnalyticsConfig | None = None):
        self.config = config or AnalyticsConfig()

    def evaluate(self, periods: Sequence[PeriodSummary]) -> AccuracyResult:
        """Backtest a period history."""
        return self.evaluate_values(weights_of(periods))

    def evaluate_values(self, values: Sequence[float]) -> AccuracyResult:
        if len(values) < self.config.min_accuracy_periods:
            return AccuracyResult(accuracy=AccuracyLevel.INSUFFICIENT_DATA)

        actual = np.asarray(values, dtype=float)[self.ERROR_START :]
        errors = naive_errors(values, self.ERROR_START)

        mean_error = float(np.mean(errors))
        mae = float(np.mean(np.abs(errors)))
        mape = self._mape(actual, errors)

        return AccuracyResult(
            accuracy=self._classify(mape),
            mean_error=mean_error,
            mean_absolute_error=mae,
            mape=mape,
            evaluated_points=len(errors),
        )

    def _mape(self, actual: np.ndarray, errors: np.ndarray) -> float | None:
        """
        Mean Absolute Percentage Error.

        Months with zero actual weight have no defined percentage error and
        are left out; None if no month qualifies.
        """
        nonzero = actual > 0
        if not nonzero.any():
            return None
        return float(100 * np.mean(np.abs(errors[nonzero]) / actual[nonzero]))

    def _classify(self, mape: float | None) -> AccuracyLevel:
        if mape is None:
            return AccuracyLevel.LOW
        if mape < self.config.high_accuracy_mape:
            return AccuracyLevel.HIGH
        if mape < self.config.medium_accuracy_mape:
            return AccuracyLevel.MEDIUM
        return AccuracyLevel.LOW


def evaluate_accuracy(
    periods: Sequence[PeriodSummary], config: AnalyticsConfig | None = None
) -> AccuracyResult:
    """Backtested accuracy of the naive one-step-ahead forecast."""
    return AccuracyEvaluator(config).evaluate(periods)
