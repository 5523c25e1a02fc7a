"""
Forecast Engine

Projects monthly demand as a trend component scaled by a seasonal
multiplier:

    trend[i]    = base + slope * (n + i - 1)     (base alone if trend is flat)
    forecast[i] = max(0, trend[i] * seasonal_index[month of i])

where base is the historical mean weight and n the history length.
Prediction intervals use the spread of the naive one-step-ahead errors
observed in history (normal approximation):

    bounds = forecast +/- z * std(|y_t - y_{t-1}|)
"""

from collections.abc import Sequence

import numpy as np

from ..config import AnalyticsConfig
from ..domain import ForecastPoint, PeriodSummary, SeasonalProfile, TrendResult
from .aggregation import weights_of
from .statistics import naive_errors


def add_months(period: str, months: int) -> str:
    """
    Advance a ``YYYY-MM`` period key by a number of months.

    >>> add_months("2024-11", 3)
    '2025-02'
    """
    year, month = int(period[:4]), int(period[5:7])
    total = year * 12 + (month - 1) + months
    return f"{total // 12:04d}-{total % 12 + 1:02d}"


class ForecastEngine:
    """
    Trend x seasonality forecaster with naive-error confidence intervals.

    Usage:
        engine = ForecastEngine()
        points = engine.forecast(periods, 12, trend, seasonality)
        points = engine.confidence_intervals(points, periods)
    """

    # Errors are measured from the third period on, leaving two periods of
    # warm-up history.
    INTERVAL_ERROR_START = 2

    def __init__(self, config: AnalyticsConfig | None = None):
        self.config = config or AnalyticsConfig()

    def forecast(
        self,
        periods: Sequence[PeriodSummary],
        horizon: int,
        trend: TrendResult,
        seasonality: SeasonalProfile | None = None,
    ) -> list[ForecastPoint]:
        """
        Generate point forecasts for the months after the last period.

        Args:
            periods: Chronological history (non-empty)
            horizon: Number of future months
            trend: Fitted trend of the history
            seasonality: Seasonal profile, or None to skip seasonal scaling

        Returns:
            ForecastPoint list without bounds
        """
        if horizon <= 0 or not periods:
            return []

        n = len(periods)
        base = float(np.mean(weights_of(periods)))
        last_period = periods[-1].period
        use_seasonality = seasonality is not None and seasonality.is_available

        points = []
        for i in range(1, horizon + 1):
            period = add_months(last_period, i)
            month = int(period[5:7])

            trend_value = base
            if trend.applies_to_forecast:
                trend_value += trend.slope * (n + i - 1)

            multiplier = seasonality.multiplier(month) if use_seasonality else 1.0

            points.append(
                ForecastPoint(
                    period=period,
                    forecast_value=max(0.0, trend_value * multiplier),
                    trend_component=trend_value,
                    seasonal_component=multiplier,
                )
            )

        return points

    def confidence_intervals(
        self,
        points: Sequence[ForecastPoint],
        periods: Sequence[PeriodSummary],
    ) -> list[ForecastPoint]:
        """
        Attach 95% prediction bounds to forecast points.

        The lower bound never goes below zero. With fewer than three periods
        of history there are no errors to measure and the bounds collapse onto
        the point forecast.
        """
        history = weights_of(periods)
        abs_errors = np.abs(naive_errors(history, self.INTERVAL_ERROR_START))
        std = float(np.std(abs_errors)) if len(abs_errors) else 0.0
        margin = self.config.confidence_z * std

        return [
            point.model_copy(
                update={
                    "lower_bound": max(0.0, point.forecast_value - margin),
                    "upper_bound": point.forecast_value + margin,
                    "confidence": self.config.confidence_level,
                }
            )
            for point in points
        ]


def forecast(
    periods: Sequence[PeriodSummary],
    horizon: int,
    trend: TrendResult,
    seasonality: SeasonalProfile | None = None,
    config: AnalyticsConfig | None = None,
) -> list[ForecastPoint]:
    """Point forecasts for ``horizon`` months after the history."""
    return ForecastEngine(config).forecast(periods, horizon, trend, seasonality)


def confidence_intervals(
    points: Sequence[ForecastPoint],
    periods: Sequence[PeriodSummary],
    config: AnalyticsConfig | None = None,
) -> list[ForecastPoint]:
    """Forecast points with 95% bounds from historical naive errors."""
    return ForecastEngine(config).confidence_intervals(points, periods)
