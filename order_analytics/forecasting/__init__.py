"""
Order Demand Forecasting Module

Closed-form statistics over monthly order history.

Components:
- aggregation: Monthly bucketing and outlier flags
- trend: Least-squares linear trend
- seasonality: Ratio-to-mean monthly seasonal indices
- engine: Trend x seasonality projection and confidence intervals
- evaluation: Naive one-step-ahead backtest (MAPE)
- statistics: Descriptive statistics helpers
"""

from .aggregation import aggregate_by_month, filter_orders, weights_of
from .trend import TrendAnalyzer, fit_trend
from .seasonality import SeasonalityAnalyzer, analyze_seasonality
from .engine import ForecastEngine, add_months, confidence_intervals, forecast
from .evaluation import AccuracyEvaluator, evaluate_accuracy

__all__ = [
    "aggregate_by_month",
    "filter_orders",
    "weights_of",
    "TrendAnalyzer",
    "fit_trend",
    "SeasonalityAnalyzer",
    "analyze_seasonality",
    "ForecastEngine",
    "add_months",
    "confidence_intervals",
    "forecast",
    "AccuracyEvaluator",
    "evaluate_accuracy",
]
