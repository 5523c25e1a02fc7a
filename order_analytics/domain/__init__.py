"""
Domain models for the order analytics core.

Orders come in; period summaries, forecasts and batch plans come out.
All models use Pydantic for validation and serialization.
"""

from .order import OrderRecord, OrderStatus, UNKNOWN_MATERIAL, coerce_orders
from .forecast import (
    PeriodSummary,
    TrendDirection,
    TrendResult,
    Strength,
    MonthIndex,
    SeasonalProfile,
    ForecastPoint,
    AccuracyLevel,
    AccuracyResult,
    InsufficientData,
    ForecastMetadata,
    ForecastResult,
)
from .batch import (
    Batch,
    BatchPlan,
    BatchPlanMetadata,
    DeliveryWindow,
    MaterialBatchResult,
    OverallEfficiency,
    Recommendation,
    RecommendationPriority,
    RecommendationType,
)

__all__ = [
    # Order
    "OrderRecord",
    "OrderStatus",
    "UNKNOWN_MATERIAL",
    "coerce_orders",
    # Forecast
    "PeriodSummary",
    "TrendDirection",
    "TrendResult",
    "Strength",
    "MonthIndex",
    "SeasonalProfile",
    "ForecastPoint",
    "AccuracyLevel",
    "AccuracyResult",
    "InsufficientData",
    "ForecastMetadata",
    "ForecastResult",
    # Batch
    "Batch",
    "BatchPlan",
    "BatchPlanMetadata",
    "DeliveryWindow",
    "MaterialBatchResult",
    "OverallEfficiency",
    "Recommendation",
    "RecommendationPriority",
    "RecommendationType",
]
