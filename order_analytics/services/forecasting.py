"""
Forecasting Service.

Runs the demand forecasting pipeline over an order book:
orders -> monthly aggregation -> {trend, seasonality} -> forecast + intervals
-> naive backtest.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ..config import AnalyticsConfig, get_config
from ..domain import (
    AccuracyResult,
    ForecastMetadata,
    ForecastResult,
    InsufficientData,
    OrderRecord,
    PeriodSummary,
    coerce_orders,
)
from ..forecasting import (
    AccuracyEvaluator,
    ForecastEngine,
    SeasonalityAnalyzer,
    TrendAnalyzer,
    aggregate_by_month,
)

logger = logging.getLogger(__name__)

OrderInput = OrderRecord | Mapping[str, Any]


class ForecastingService:
    """
    Service for monthly demand forecasts.

    Stateless: every call works only on the orders it is given, so one
    instance can be shared between threads.

    Usage:
        service = ForecastingService()
        result = service.build_forecast(orders, horizon=6, material="SUS304")
    """

    def __init__(self, config: AnalyticsConfig | None = None):
        self.config = config or get_config()
        self.trend_analyzer = TrendAnalyzer(self.config)
        self.seasonality_analyzer = SeasonalityAnalyzer(self.config)
        self.engine = ForecastEngine(self.config)
        self.evaluator = AccuracyEvaluator(self.config)

    def aggregate(
        self,
        orders: Iterable[OrderInput],
        material: str | None = None,
        customer: str | None = None,
    ) -> list[PeriodSummary]:
        """Aggregate orders into monthly period summaries."""
        records = coerce_orders(orders)
        periods = aggregate_by_month(
            records,
            material=material,
            customer=customer,
            outlier_z_threshold=self.config.outlier_z_threshold,
        )
        outliers = [p.period for p in periods if p.is_outlier]
        if outliers:
            logger.info("Outlier months flagged: %s", ", ".join(outliers))
        return periods

    def build_forecast(
        self,
        orders: Iterable[OrderInput],
        horizon: int | None = None,
        material: str | None = None,
        customer: str | None = None,
        include_seasonality: bool = True,
    ) -> ForecastResult | InsufficientData:
        """
        Generate a demand forecast from order history.

        Args:
            orders: Historical orders (any status)
            horizon: Months to forecast (default: config.forecast_periods)
            material: Restrict history to one material
            customer: Restrict history to one customer
            include_seasonality: Apply seasonal indices when available

        Returns:
            ForecastResult, or InsufficientData when history has fewer
            months than config.min_forecast_periods
        """
        if horizon is None:
            horizon = self.config.forecast_periods

        periods = self.aggregate(orders, material=material, customer=customer)
        required = self.config.min_forecast_periods

        if len(periods) < required:
            logger.warning(
                "Forecast refused: %d months of history, %d required", len(periods), required
            )
            return InsufficientData(
                required=required,
                actual=len(periods),
                message=f"Forecasting needs at least {required} months of history",
            )

        trend = self.trend_analyzer.fit(periods)
        seasonality = self.seasonality_analyzer.analyze(periods) if include_seasonality else None
        logger.debug(
            "Trend %s (slope=%.3f, r2=%.3f), seasonality %s",
            trend.direction.value,
            trend.slope,
            trend.r_squared,
            seasonality.strength.value if seasonality else "disabled",
        )

        points = self.engine.forecast(periods, horizon, trend, seasonality)
        points = self.engine.confidence_intervals(points, periods)

        return ForecastResult(
            forecast=points,
            trend=trend,
            seasonality=seasonality,
            accuracy=self.evaluator.evaluate(periods),
            history=periods,
            metadata=ForecastMetadata(
                data_points=len(periods),
                forecast_periods=max(horizon, 0),
                material=material,
                customer=customer,
            ),
        )

    def evaluate_accuracy(self, periods: Sequence[PeriodSummary]) -> AccuracyResult:
        """Backtest the naive forecast over a period history."""
        return self.evaluator.evaluate(periods)


def aggregate_orders(
    orders: Iterable[OrderInput],
    material: str | None = None,
    customer: str | None = None,
) -> list[PeriodSummary]:
    """Monthly period summaries of an order book."""
    return ForecastingService().aggregate(orders, material=material, customer=customer)


def build_forecast(
    orders: Iterable[OrderInput],
    horizon: int | None = None,
    material: str | None = None,
    customer: str | None = None,
    include_seasonality: bool = True,
) -> ForecastResult | InsufficientData:
    """Demand forecast of an order book, or InsufficientData on thin history."""
    return ForecastingService().build_forecast(
        orders,
        horizon=horizon,
        material=material,
        customer=customer,
        include_seasonality=include_seasonality,
    )


def evaluate_accuracy(periods: Sequence[PeriodSummary]) -> AccuracyResult:
    """Naive one-step-ahead backtest of a period history."""
    return ForecastingService().evaluate_accuracy(periods)
