"""
Order analytics core.

Demand forecasting and production batch optimization for a manufacturing
order book. The public boundary is four pure functions:

- aggregate_orders: monthly period summaries
- build_forecast: trend x seasonality forecast with confidence bounds
- optimize_batches: greedy production batch plan
- evaluate_accuracy: naive one-step-ahead backtest
"""

from .services import aggregate_orders, build_forecast, evaluate_accuracy, optimize_batches

__version__ = "0.1.0"

__all__ = [
    "aggregate_orders",
    "build_forecast",
    "evaluate_accuracy",
    "optimize_batches",
]
