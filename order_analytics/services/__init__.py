"""
Core services for order analytics.

Business logic layer containing:
- Forecasting: Monthly demand forecasts from order history
- Optimization: Greedy production batch planning
- Analytics: Async facade running both pipelines concurrently
"""

from .forecasting import ForecastingService, aggregate_orders, build_forecast, evaluate_accuracy
from .optimization import BatchOptimizer, optimize_batches, order_urgency
from .analytics import AnalyticsReport, AnalyticsService

__all__ = [
    "ForecastingService",
    "aggregate_orders",
    "build_forecast",
    "evaluate_accuracy",
    "BatchOptimizer",
    "optimize_batches",
    "order_urgency",
    "AnalyticsReport",
    "AnalyticsService",
]
