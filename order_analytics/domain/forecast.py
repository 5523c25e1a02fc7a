"""
Forecast domain models.

Represents monthly history, trend and seasonality decompositions, forecast
points and backtest accuracy. Every stage that can run short of history has a
structured ``insufficient_data`` state instead of raising.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, computed_field


class TrendDirection(str, Enum):
    """Direction of a fitted linear trend."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"  # |slope| < 0.1
    INSUFFICIENT_DATA = "insufficient_data"


class Strength(str, Enum):
    """Qualitative strength of a trend or seasonal pattern."""

    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    INSUFFICIENT_DATA = "insufficient_data"


class AccuracyLevel(str, Enum):
    """Backtest accuracy bands by MAPE."""

    HIGH = "high"  # MAPE < 10
    MEDIUM = "medium"  # MAPE < 20
    LOW = "low"
    INSUFFICIENT_DATA = "insufficient_data"


class PeriodSummary(BaseModel):
    """
    Aggregated orders for one calendar month.

    ``period`` is a zero-padded ``YYYY-MM`` key, so plain string ordering is
    chronological.
    """

    period: str = Field(pattern=r"^\d{4}-\d{2}$")
    order_count: int = Field(default=0, ge=0)
    total_weight: float = Field(default=0.0, ge=0)
    total_revenue: float = 0.0
    z_score: float = 0.0
    is_outlier: bool = False

    model_config = {"frozen": True}

    @computed_field
    @property
    def year(self) -> int:
        return int(self.period[:4])

    @computed_field
    @property
    def month(self) -> int:
        return int(self.period[5:7])


class TrendResult(BaseModel):
    """Least-squares linear trend over a period series."""

    direction: TrendDirection
    slope: float = 0.0
    intercept: float = 0.0
    r_squared: float = Field(default=0.0, ge=0, le=1)
    strength: Strength = Strength.WEAK

    model_config = {"frozen": True}

    @computed_field
    @property
    def is_available(self) -> bool:
        return self.direction != TrendDirection.INSUFFICIENT_DATA

    @computed_field
    @property
    def applies_to_forecast(self) -> bool:
        """True if the slope should shift the forecast baseline."""
        return self.direction in (TrendDirection.INCREASING, TrendDirection.DECREASING)


class MonthIndex(BaseModel):
    """Seasonal index of one calendar month."""

    month: int = Field(ge=1, le=12)
    index: float

    model_config = {"frozen": True}


class SeasonalProfile(BaseModel):
    """
    Per-calendar-month seasonal indices.

    An index of 1.2 means that month runs 20% above the overall average.
    """

    strength: Strength
    indices: dict[int, float] = Field(default_factory=dict)
    peak_months: list[MonthIndex] = Field(default_factory=list)
    low_months: list[MonthIndex] = Field(default_factory=list)
    variance: float = 0.0

    model_config = {"frozen": True}

    @computed_field
    @property
    def is_available(self) -> bool:
        return self.strength != Strength.INSUFFICIENT_DATA

    def multiplier(self, month: int) -> float:
        """Seasonal multiplier for a month; neutral when unknown."""
        index = self.indices.get(month)
        if index is None:
            return 1.0
        return index


class ForecastPoint(BaseModel):
    """
    Forecast for one future month.

    Bounds are filled in by the confidence interval stage.
    """

    period: str = Field(pattern=r"^\d{4}-\d{2}$")
    forecast_value: float = Field(ge=0)
    trend_component: float
    seasonal_component: float = 1.0
    lower_bound: float | None = None
    upper_bound: float | None = None
    confidence: float | None = None

    model_config = {"frozen": True}

    @computed_field
    @property
    def interval_width(self) -> float | None:
        if self.lower_bound is None or self.upper_bound is None:
            return None
        return self.upper_bound - self.lower_bound


class AccuracyResult(BaseModel):
    """Naive one-step-ahead backtest metrics."""

    accuracy: AccuracyLevel
    mean_error: float | None = None
    mean_absolute_error: float | None = None
    mape: float | None = None  # Mean Absolute Percentage Error
    evaluated_points: int = 0

    model_config = {"frozen": True}


class InsufficientData(BaseModel):
    """Returned instead of a forecast when history is too short."""

    error: Literal["insufficient_data"] = "insufficient_data"
    required: int
    actual: int
    message: str = ""

    model_config = {"frozen": True}


class ForecastMetadata(BaseModel):
    """Context of a forecast run."""

    data_points: int
    forecast_periods: int
    material: str | None = None
    customer: str | None = None

    model_config = {"frozen": True}


class ForecastResult(BaseModel):
    """Complete demand forecast with its decomposition and backtest."""

    forecast: list[ForecastPoint]
    trend: TrendResult
    seasonality: SeasonalProfile | None = None
    accuracy: AccuracyResult
    history: list[PeriodSummary] = Field(default_factory=list)
    metadata: ForecastMetadata

    model_config = {"frozen": True}

    @computed_field
    @property
    def total_forecast_weight(self) -> float:
        """Sum of forecast weight over the horizon."""
        return sum(p.forecast_value for p in self.forecast)
