"""
Analytics configuration.

Thresholds for forecasting and batch optimization. Defaults match the
behaviour the order-management application relies on; any of them can be
overridden through ``ORDER_ANALYTICS_*`` environment variables.
"""

import os
from dataclasses import dataclass, fields
from typing import Optional


ENV_PREFIX = "ORDER_ANALYTICS_"


@dataclass(frozen=True)
class AnalyticsConfig:
    """Configuration for forecasting and batch optimization."""

    # Forecasting
    forecast_periods: int = 12  # Default horizon (months)
    min_forecast_periods: int = 6
    seasonality_period: int = 12
    min_accuracy_periods: int = 4
    outlier_z_threshold: float = 3.0
    confidence_z: float = 1.96  # 95% normal interval
    confidence_level: float = 0.95

    # Trend classification
    stable_slope_threshold: float = 0.1
    moderate_slope_threshold: float = 0.5
    strong_slope_threshold: float = 1.0

    # Seasonality classification (variance of index - 1)
    moderate_seasonality_variance: float = 0.05
    strong_seasonality_variance: float = 0.1

    # Accuracy bands (MAPE %)
    high_accuracy_mape: float = 10.0
    medium_accuracy_mape: float = 20.0

    # Batch optimization
    target_batch_weight: float = 300.0  # kg
    max_batch_variance: float = 0.2
    low_efficiency_threshold: float = 70.0  # %
    material_efficiency_threshold: float = 75.0  # %
    max_delivery_span_days: int = 14

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "AnalyticsConfig":
        """
        Build a config from environment variables.

        ``ORDER_ANALYTICS_TARGET_BATCH_WEIGHT=500`` overrides
        ``target_batch_weight``; unset variables keep their defaults.
        """
        overrides = {}
        for f in fields(cls):
            raw = os.getenv(prefix + f.name.upper())
            if raw is None or raw == "":
                continue
            converter = int if f.type in (int, "int") else float
            try:
                overrides[f.name] = converter(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {prefix}{f.name.upper()}: {raw!r}") from exc
        return cls(**overrides)


_config: Optional[AnalyticsConfig] = None


def get_config() -> AnalyticsConfig:
    """Get or create the process-wide configuration."""
    global _config

    if _config is None:
        _config = AnalyticsConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached configuration (for testing)."""
    global _config
    _config = None
