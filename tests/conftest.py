"""Pytest fixtures for order analytics tests."""

from datetime import date, timedelta

import pytest

from order_analytics.config import AnalyticsConfig, reset_config
from order_analytics.data.synthetic import OrderBookGenerator
from order_analytics.domain import OrderRecord, OrderStatus, PeriodSummary
from order_analytics.services import AnalyticsService, BatchOptimizer, ForecastingService


AS_OF = date(2024, 6, 1)


@pytest.fixture(autouse=True)
def _fresh_config():
    """Keep environment-derived config from leaking between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def as_of() -> date:
    """Reference date for urgency calculations."""
    return AS_OF


@pytest.fixture
def make_order():
    """Factory for order records with sensible defaults."""
    counter = {"n": 0}

    def _make(
        weight: float = 100.0,
        material: str | None = "SUS304",
        order_date: date = date(2024, 5, 1),
        delivery_date: date | None = AS_OF + timedelta(days=30),
        status: OrderStatus = OrderStatus.PENDING,
        customer: str | None = "Tokai Pump",
        **kwargs,
    ) -> OrderRecord:
        counter["n"] += 1
        return OrderRecord(
            id=f"ORD-{counter['n']:04d}",
            material=material,
            customer=customer,
            order_date=order_date,
            delivery_date=delivery_date,
            total_weight=weight,
            status=status,
            **kwargs,
        )

    return _make


@pytest.fixture
def monthly_orders(make_order):
    """One completed order per month carrying the given weights, from January 2023."""

    def _build(weights: list[float], start_year: int = 2023, start_month: int = 1):
        orders = []
        year, month = start_year, start_month
        for weight in weights:
            orders.append(
                make_order(
                    weight=weight,
                    order_date=date(year, month, 15),
                    status=OrderStatus.COMPLETED,
                )
            )
            month += 1
            if month > 12:
                month = 1
                year += 1
        return orders

    return _build


@pytest.fixture
def make_periods():
    """Period summaries for a weight series, from January 2023."""

    def _build(weights: list[float], start_year: int = 2023, start_month: int = 1):
        periods = []
        offset = start_year * 12 + start_month - 1
        for i, weight in enumerate(weights):
            total = offset + i
            periods.append(
                PeriodSummary(
                    period=f"{total // 12:04d}-{total % 12 + 1:02d}",
                    order_count=1,
                    total_weight=weight,
                )
            )
        return periods

    return _build


@pytest.fixture
def synthetic_history() -> list[OrderRecord]:
    """Two years of completed orders with growth and seasonality."""
    return OrderBookGenerator(seed=42).generate_history(date(2022, 6, 1), months=24)


@pytest.fixture
def synthetic_pending() -> list[OrderRecord]:
    """Open orders around the reference date."""
    return OrderBookGenerator(seed=7).generate_pending(AS_OF, count=50)


@pytest.fixture
def config() -> AnalyticsConfig:
    return AnalyticsConfig()


@pytest.fixture
def forecasting_service(config) -> ForecastingService:
    """Create a forecasting service for testing."""
    return ForecastingService(config)


@pytest.fixture
def optimizer(config) -> BatchOptimizer:
    """Create a batch optimizer for testing."""
    return BatchOptimizer(config)


@pytest.fixture
def analytics_service(config) -> AnalyticsService:
    """Create an async analytics service for testing."""
    return AnalyticsService(config)
