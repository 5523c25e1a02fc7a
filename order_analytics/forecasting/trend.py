"""
Linear trend analysis.

Fits y = intercept + slope * x by ordinary least squares, where x is the
position of a month in the history and y its total weight. The closed-form
normal equations are used directly:

    slope = (n*Sxy - Sx*Sy) / (n*Sxx - Sx^2)
    intercept = (Sy - slope*Sx) / n
    R^2 = 1 - SS_res / SS_tot
"""

from collections.abc import Sequence

import numpy as np

from ..config import AnalyticsConfig
from ..domain import PeriodSummary, Strength, TrendDirection, TrendResult
from .aggregation import weights_of


class TrendAnalyzer:
    """
    Least-squares trend fitting and classification.

    Direction is ``stable`` when |slope| falls under the stable threshold,
    otherwise the slope's sign decides. Strength grades |slope| against the
    moderate and strong thresholds.
    """

    def __init__(self, config: AnalyticsConfig | None = None):
        self.config = config or AnalyticsConfig()

    def fit(self, periods: Sequence[PeriodSummary]) -> TrendResult:
        """Fit a trend to period summaries in chronological order."""
        return self.fit_values(weights_of(periods))

    def fit_values(self, values: Sequence[float]) -> TrendResult:
        """Fit a trend to a raw value series."""
        n = len(values)
        if n < 2:
            return TrendResult(
                direction=TrendDirection.INSUFFICIENT_DATA,
                slope=0.0,
                strength=Strength.INSUFFICIENT_DATA,
            )

        x = np.arange(n, dtype=float)
        y = np.asarray(values, dtype=float)

        sum_x = x.sum()
        sum_y = y.sum()
        sum_xy = (x * y).sum()
        sum_xx = (x * x).sum()

        # Distinct x positions keep the denominator positive for n >= 2
        slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x**2)
        intercept = (sum_y - slope * sum_x) / n

        predicted = slope * x + intercept
        ss_total = float(((y - y.mean()) ** 2).sum())
        ss_residual = float(((y - predicted) ** 2).sum())

        return TrendResult(
            direction=self._classify_direction(float(slope)),
            slope=float(slope),
            intercept=float(intercept),
            r_squared=self._r_squared(ss_residual, ss_total),
            strength=self._classify_strength(float(slope)),
        )

    def _r_squared(self, ss_residual: float, ss_total: float) -> float:
        """
        Coefficient of determination, clamped to [0, 1].

        A flat series has no variance to explain; an exact fit on it scores 1.
        """
        if ss_total <= 1e-12:
            return 1.0 if ss_residual <= 1e-12 else 0.0
        return float(min(1.0, max(0.0, 1.0 - ss_residual / ss_total)))

    def _classify_direction(self, slope: float) -> TrendDirection:
        if abs(slope) < self.config.stable_slope_threshold:
            return TrendDirection.STABLE
        return TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING

    def _classify_strength(self, slope: float) -> Strength:
        magnitude = abs(slope)
        if magnitude > self.config.strong_slope_threshold:
            return Strength.STRONG
        if magnitude > self.config.moderate_slope_threshold:
            return Strength.MODERATE
        return Strength.WEAK


def fit_trend(
    periods: Sequence[PeriodSummary], config: AnalyticsConfig | None = None
) -> TrendResult:
    """Fit a linear trend to monthly period summaries."""
    return TrendAnalyzer(config).fit(periods)
