"""
Seasonality analysis.

Computes a ratio-to-mean seasonal index per calendar month:

    index[m] = mean(weight of periods in month m) / mean(weight of all periods)

With one full, evenly covered cycle the twelve indices average to exactly 1.
Pattern strength is the mean squared deviation of the indices from 1.
"""

from collections import defaultdict
from collections.abc import Sequence

import numpy as np

from ..config import AnalyticsConfig
from ..domain import MonthIndex, PeriodSummary, SeasonalProfile, Strength
from .aggregation import weights_of


class SeasonalityAnalyzer:
    """
    Monthly seasonal index estimation.

    Needs at least one full season (``seasonality_period`` periods) of
    history; shorter histories return an ``insufficient_data`` profile with
    no indices.
    """

    TOP_N = 3

    def __init__(self, config: AnalyticsConfig | None = None):
        self.config = config or AnalyticsConfig()

    def analyze(self, periods: Sequence[PeriodSummary]) -> SeasonalProfile:
        """Build the seasonal profile of a period history."""
        if len(periods) < self.config.seasonality_period:
            return SeasonalProfile(strength=Strength.INSUFFICIENT_DATA)

        by_month: dict[int, list[float]] = defaultdict(list)
        for period in periods:
            by_month[period.month].append(period.total_weight)

        overall_mean = float(np.mean(weights_of(periods)))

        indices: dict[int, float] = {}
        for month in sorted(by_month):
            if overall_mean > 0:
                indices[month] = float(np.mean(by_month[month])) / overall_mean
            else:
                indices[month] = 1.0

        deviations = np.array(list(indices.values())) - 1.0
        variance = float(np.mean(deviations**2))

        return SeasonalProfile(
            strength=self._classify(variance),
            indices=indices,
            peak_months=self._rank(indices, highest=True),
            low_months=self._rank(indices, highest=False),
            variance=variance,
        )

    def _classify(self, variance: float) -> Strength:
        if variance > self.config.strong_seasonality_variance:
            return Strength.STRONG
        if variance > self.config.moderate_seasonality_variance:
            return Strength.MODERATE
        return Strength.WEAK

    def _rank(self, indices: dict[int, float], highest: bool) -> list[MonthIndex]:
        """Top or bottom months by index; ties keep calendar order."""
        ordered = sorted(indices.items(), key=lambda kv: -kv[1] if highest else kv[1])
        return [MonthIndex(month=m, index=i) for m, i in ordered[: self.TOP_N]]


def analyze_seasonality(
    periods: Sequence[PeriodSummary], config: AnalyticsConfig | None = None
) -> SeasonalProfile:
    """Compute per-calendar-month seasonal indices."""
    return SeasonalityAnalyzer(config).analyze(periods)
