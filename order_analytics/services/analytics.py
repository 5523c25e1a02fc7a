"""
Analytics Service.

Async facade for event-loop hosts. The forecasting and batching pipelines
share no state, so they run side by side on worker threads; callers may bound
each run with a timeout.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from ..config import AnalyticsConfig, get_config
from ..domain import BatchPlan, ForecastResult, InsufficientData, OrderRecord, coerce_orders
from .forecasting import ForecastingService
from .optimization import BatchOptimizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsReport:
    """Demand forecast and batch plan computed from one order snapshot."""

    forecast: ForecastResult | InsufficientData
    batch_plan: BatchPlan


class AnalyticsService:
    """
    Runs the analytics pipelines off the event loop.

    Usage:
        service = AnalyticsService()
        report = await service.analyze(orders, horizon=6, timeout=5.0)

    A timeout raises ``asyncio.TimeoutError`` to the caller. When one pipeline
    of ``analyze`` fails, the other is cancelled before the error propagates.
    Worker threads finish their (bounded) computation in the background and
    their results are discarded.
    """

    def __init__(self, config: AnalyticsConfig | None = None):
        self.config = config or get_config()
        self.forecasting = ForecastingService(self.config)
        self.optimizer = BatchOptimizer(self.config)

    async def _run(self, func, *args, timeout: float | None = None, **kwargs):
        call = asyncio.to_thread(func, *args, **kwargs)
        if timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=timeout)

    async def forecast_demand(
        self,
        orders: Sequence[OrderRecord | Mapping[str, Any]],
        horizon: int | None = None,
        material: str | None = None,
        customer: str | None = None,
        include_seasonality: bool = True,
        timeout: float | None = None,
    ) -> ForecastResult | InsufficientData:
        """Build a demand forecast on a worker thread."""
        return await self._run(
            self.forecasting.build_forecast,
            orders,
            horizon=horizon,
            material=material,
            customer=customer,
            include_seasonality=include_seasonality,
            timeout=timeout,
        )

    async def plan_batches(
        self,
        orders: Sequence[OrderRecord | Mapping[str, Any]],
        target_weight: float | None = None,
        max_variance_fraction: float | None = None,
        consider_delivery_dates: bool = True,
        prioritize_urgent: bool = True,
        as_of: date | None = None,
        timeout: float | None = None,
    ) -> BatchPlan:
        """Plan production batches on a worker thread."""
        return await self._run(
            self.optimizer.optimize,
            orders,
            target_weight=target_weight,
            max_variance_fraction=max_variance_fraction,
            consider_delivery_dates=consider_delivery_dates,
            prioritize_urgent=prioritize_urgent,
            as_of=as_of,
            timeout=timeout,
        )

    async def analyze(
        self,
        orders: Sequence[OrderRecord | Mapping[str, Any]],
        horizon: int | None = None,
        material: str | None = None,
        target_weight: float | None = None,
        max_variance_fraction: float | None = None,
        as_of: date | None = None,
        timeout: float | None = None,
    ) -> AnalyticsReport:
        """
        Run forecast and batch planning concurrently on one order snapshot.

        Args:
            orders: Order book
            horizon: Forecast horizon in months
            material: Restrict the forecast to one material
            target_weight: Target batch weight in kg
            max_variance_fraction: Allowed batch weight deviation
            as_of: Reference date for urgency
            timeout: Seconds allowed for each pipeline

        Returns:
            AnalyticsReport with both results
        """
        # Validate once so both pipelines see the same records
        snapshot = coerce_orders(orders)
        logger.debug("Analyzing %d orders", len(snapshot))

        tasks = [
            asyncio.create_task(
                self.forecast_demand(snapshot, horizon=horizon, material=material, timeout=timeout)
            ),
            asyncio.create_task(
                self.plan_batches(
                    snapshot,
                    target_weight=target_weight,
                    max_variance_fraction=max_variance_fraction,
                    as_of=as_of,
                    timeout=timeout,
                )
            ),
        ]
        try:
            forecast, plan = await asyncio.gather(*tasks)
        except BaseException:
            # First failure wins; the sibling is cancelled and its outcome collected
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return AnalyticsReport(forecast=forecast, batch_plan=plan)
