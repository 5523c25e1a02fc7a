"""Tests for core services."""

import asyncio
import time
from datetime import date, timedelta

import pytest

from order_analytics import aggregate_orders, build_forecast, evaluate_accuracy, optimize_batches
from order_analytics.config import AnalyticsConfig
from order_analytics.domain import (
    AccuracyLevel,
    BatchPlan,
    ForecastResult,
    InsufficientData,
    OrderStatus,
    RecommendationType,
    Strength,
)
from order_analytics.errors import InvalidInputError
from order_analytics.services import BatchOptimizer, ForecastingService, order_urgency


class TestForecastingService:
    """Tests for the forecasting service."""

    def test_refuses_short_history(self, monthly_orders):
        """Test fewer than 6 months yields a structured insufficient_data result."""
        result = build_forecast(monthly_orders([100, 110, 120, 130, 140]))

        assert isinstance(result, InsufficientData)
        assert result.error == "insufficient_data"
        assert result.required == 6
        assert result.actual == 5

    def test_empty_order_book(self):
        result = build_forecast([])
        assert isinstance(result, InsufficientData)
        assert result.actual == 0

    def test_horizon_zero(self, monthly_orders):
        result = build_forecast(monthly_orders([100.0] * 6), horizon=0)

        assert isinstance(result, ForecastResult)
        assert result.forecast == []
        assert result.total_forecast_weight == 0

    def test_full_forecast(self, synthetic_history):
        result = build_forecast(synthetic_history)

        assert isinstance(result, ForecastResult)
        assert len(result.forecast) == 12
        assert result.metadata.data_points == 24
        assert result.seasonality is not None and result.seasonality.is_available
        assert len(result.seasonality.indices) == 12
        assert result.accuracy.accuracy != AccuracyLevel.INSUFFICIENT_DATA
        for point in result.forecast:
            assert point.forecast_value >= 0
            assert point.lower_bound <= point.forecast_value <= point.upper_bound
            assert point.lower_bound >= 0
            assert point.confidence == 0.95

    def test_forecast_periods_follow_history(self, monthly_orders):
        result = build_forecast(monthly_orders([100.0] * 8), horizon=6)  # Jan..Aug 2023
        assert [p.period for p in result.forecast] == [
            "2023-09",
            "2023-10",
            "2023-11",
            "2023-12",
            "2024-01",
            "2024-02",
        ]

    def test_seasonality_can_be_disabled(self, synthetic_history):
        result = build_forecast(synthetic_history, horizon=3, include_seasonality=False)
        assert result.seasonality is None
        assert all(p.seasonal_component == 1.0 for p in result.forecast)

    def test_short_history_skips_seasonality(self, monthly_orders):
        result = build_forecast(monthly_orders([100, 120, 90, 110, 105, 95, 100]), horizon=2)
        assert result.seasonality.strength == Strength.INSUFFICIENT_DATA
        assert all(p.seasonal_component == 1.0 for p in result.forecast)

    def test_declining_history_never_negative(self, monthly_orders):
        result = build_forecast(monthly_orders([600, 500, 400, 300, 200, 100]), horizon=12)
        assert all(p.forecast_value >= 0 for p in result.forecast)
        assert all(p.lower_bound >= 0 for p in result.forecast)

    def test_material_filter(self, synthetic_history):
        result = build_forecast(synthetic_history, horizon=2, material="SUS304")
        everything = build_forecast(synthetic_history, horizon=2)

        assert result.metadata.material == "SUS304"
        assert sum(p.total_weight for p in result.history) < sum(
            p.total_weight for p in everything.history
        )

    def test_unknown_customer_is_insufficient(self, synthetic_history):
        result = build_forecast(synthetic_history, customer="Nobody Ltd")
        assert isinstance(result, InsufficientData)

    def test_accepts_mappings(self):
        orders = [
            {"id": str(m), "orderDate": f"2024-{m:02d}-10", "totalWeight": 100 + m, "status": "completed"}
            for m in range(1, 8)
        ]
        result = build_forecast(orders, horizon=1)
        assert isinstance(result, ForecastResult)
        assert result.trend.slope == pytest.approx(1.0)

    def test_idempotent(self, synthetic_history):
        first = build_forecast(synthetic_history, horizon=6)
        second = build_forecast(synthetic_history, horizon=6)

        assert first == second

    def test_shutdown_month_forecast_zero(self, monthly_orders):
        """Test a calendar month with no weight in history stays at zero."""
        year = [100.0] * 12
        year[7] = 0.0  # August shutdown
        result = build_forecast(monthly_orders(year * 2), horizon=12)  # 2023-01..2024-12

        assert result.seasonality.is_available
        assert result.seasonality.indices[8] == 0.0
        august = next(p for p in result.forecast if p.period == "2025-08")
        assert august.seasonal_component == 0.0
        assert august.forecast_value == 0.0
        assert all(p.forecast_value > 0 for p in result.forecast if p.period != "2025-08")

    def test_custom_minimum_history(self, monthly_orders):
        service = ForecastingService(AnalyticsConfig(min_forecast_periods=8))
        result = service.build_forecast(monthly_orders([100.0] * 7))
        assert isinstance(result, InsufficientData)
        assert result.required == 8

    def test_aggregate_orders(self, synthetic_history):
        periods = aggregate_orders(synthetic_history)
        assert len(periods) == 24
        assert periods[0].period == "2022-06"
        assert periods[-1].period == "2024-05"

    def test_evaluate_accuracy(self, synthetic_history):
        periods = aggregate_orders(synthetic_history)
        assert evaluate_accuracy(periods[:3]).accuracy == AccuracyLevel.INSUFFICIENT_DATA
        assert evaluate_accuracy(periods).mape is not None


class TestOrderUrgency:
    """Tests for urgency scoring."""

    @pytest.mark.parametrize(
        "days,expected",
        [(-5, 10), (-1, 10), (0, 8), (3, 8), (4, 6), (7, 6), (8, 4), (14, 4), (15, 2), (90, 2)],
    )
    def test_buckets(self, make_order, as_of, days, expected):
        order = make_order(delivery_date=as_of + timedelta(days=days))
        assert order_urgency(order, as_of) == expected

    def test_missing_delivery_date_is_lowest(self, make_order, as_of):
        assert order_urgency(make_order(delivery_date=None), as_of) == 2


class TestBatchOptimizer:
    """Tests for greedy batch optimization."""

    def test_reference_packing(self, make_order, as_of):
        """Test [100, 100, 100, 250] packs into a full batch and a 250 kg batch."""
        orders = [make_order(weight=w) for w in [100, 100, 100, 250]]

        plan = optimize_batches(orders, target_weight=300, max_variance_fraction=0.2, as_of=as_of)

        assert plan.total_batches == 2
        first, second = plan.batches
        assert [o.id for o in first.orders] == [o.id for o in orders[:3]]
        assert first.total_weight == 300
        assert first.efficiency == pytest.approx(100.0)
        assert second.order_ids == [orders[3].id]
        assert second.efficiency == pytest.approx(250 / 300 * 100)
        assert plan.average_efficiency == pytest.approx((100 + 250 / 3) / 2)
        assert plan.total_weight == 550
        assert plan.overall.wasted_capacity == pytest.approx(50)
        assert plan.overall.weight_utilization == pytest.approx(550 / 600 * 100)
        assert plan.recommendations == []

    def test_never_drops_orders(self, synthetic_pending, synthetic_history, as_of):
        orders = synthetic_history + synthetic_pending
        plan = optimize_batches(orders, as_of=as_of)

        pending = [o for o in orders if o.status == OrderStatus.PENDING]
        assert sum(b.order_count for b in plan.batches) == len(pending)
        assert plan.total_orders_batched == len(pending)
        assert plan.metadata.total_orders == len(pending)
        batched_ids = sorted(id(o) for b in plan.batches for o in b.orders)
        assert batched_ids == sorted(id(o) for o in pending)

    def test_only_pending_orders(self, make_order, as_of):
        orders = [
            make_order(weight=100, status=OrderStatus.PENDING),
            make_order(weight=100, status=OrderStatus.PROCESSING),
            make_order(weight=100, status=OrderStatus.COMPLETED),
            make_order(weight=100, status=OrderStatus.CANCELLED),
        ]
        plan = optimize_batches(orders, as_of=as_of)
        assert plan.total_orders_batched == 1

    def test_partitions_by_material(self, make_order, as_of):
        orders = [
            make_order(weight=300, material="SUS304"),
            make_order(weight=300, material="SCS"),
            make_order(weight=10, material=None),
            make_order(weight=10, material=""),
        ]
        plan = optimize_batches(orders, as_of=as_of)

        assert set(plan.by_material) == {"SUS304", "SCS", "unknown"}
        assert all(len({o.material_key for o in b.orders}) == 1 for b in plan.batches)
        unknown = plan.by_material["unknown"]
        assert unknown.total_batches == 1
        assert unknown.batches[0].order_count == 2

    def test_oversized_order_gets_own_batch(self, make_order, as_of):
        orders = [make_order(weight=100), make_order(weight=900), make_order(weight=200)]
        plan = optimize_batches(
            orders,
            target_weight=300,
            max_variance_fraction=0.2,
            prioritize_urgent=False,
            consider_delivery_dates=False,
            as_of=as_of,
        )

        assert [b.total_weight for b in plan.batches] == [100, 900, 200]
        assert plan.batches[1].efficiency == 100.0

    def test_urgent_orders_first(self, make_order, as_of):
        relaxed = make_order(weight=300, delivery_date=as_of + timedelta(days=60))
        overdue = make_order(weight=300, delivery_date=as_of - timedelta(days=3))

        plan = optimize_batches([relaxed, overdue], as_of=as_of)

        assert plan.batches[0].orders[0] is overdue
        assert plan.batches[0].urgency == 10
        assert plan.batches[1].urgency == 2

    def test_delivery_date_tie_break(self, make_order, as_of):
        later = make_order(weight=300, delivery_date=as_of + timedelta(days=40))
        undated = make_order(weight=300, delivery_date=None)
        sooner = make_order(weight=300, delivery_date=as_of + timedelta(days=20))

        plan = optimize_batches([later, undated, sooner], as_of=as_of)

        # all urgency 2: delivery date ascending, undated last
        assert [b.orders[0] for b in plan.batches] == [sooner, later, undated]

    def test_input_order_kept_without_sorting(self, make_order, as_of):
        orders = [
            make_order(weight=300, delivery_date=as_of + timedelta(days=40)),
            make_order(weight=300, delivery_date=as_of - timedelta(days=1)),
        ]
        plan = optimize_batches(
            orders, prioritize_urgent=False, consider_delivery_dates=False, as_of=as_of
        )
        assert [b.orders[0] for b in plan.batches] == orders

    def test_delivery_window(self, make_order, as_of):
        orders = [
            make_order(weight=100, delivery_date=as_of + timedelta(days=20)),
            make_order(weight=100, delivery_date=None),
            make_order(weight=100, delivery_date=as_of + timedelta(days=25)),
        ]
        plan = optimize_batches(orders, as_of=as_of)

        window = plan.batches[0].delivery_window
        assert window.earliest == as_of + timedelta(days=20)
        assert window.latest == as_of + timedelta(days=25)
        assert window.span_days == 5

    def test_delivery_window_without_dates(self, make_order, as_of):
        plan = optimize_batches([make_order(weight=300, delivery_date=None)], as_of=as_of)
        window = plan.batches[0].delivery_window
        assert window.earliest is None and window.latest is None
        assert window.span_days == 0

    def test_low_efficiency_recommendations(self, make_order, as_of):
        plan = optimize_batches([make_order(weight=100)], target_weight=300, as_of=as_of)

        types = {r.type for r in plan.recommendations}
        assert RecommendationType.EFFICIENCY_IMPROVEMENT in types
        assert RecommendationType.MATERIAL_EFFICIENCY in types
        efficiency = next(
            r for r in plan.recommendations if r.type == RecommendationType.EFFICIENCY_IMPROVEMENT
        )
        assert efficiency.affected_batches == [plan.batches[0].id]

    def test_delivery_spread_recommendation(self, make_order, as_of):
        orders = [
            make_order(weight=150, delivery_date=as_of + timedelta(days=20)),
            make_order(weight=150, delivery_date=as_of + timedelta(days=40)),
        ]
        plan = optimize_batches(orders, target_weight=300, as_of=as_of)

        assert plan.total_batches == 1
        assert plan.batches[0].delivery_window.span_days == 20
        assert [r.type for r in plan.recommendations] == [RecommendationType.DELIVERY_OPTIMIZATION]

    def test_empty_input(self, as_of):
        plan = optimize_batches([], as_of=as_of)

        assert isinstance(plan, BatchPlan)
        assert plan.total_batches == 0
        assert plan.average_efficiency == 0
        assert plan.total_weight == 0
        assert plan.recommendations == []

    @pytest.mark.parametrize("target,variance", [(0, 0.2), (-10, 0.2), (300, -0.1)])
    def test_invalid_parameters(self, make_order, target, variance):
        with pytest.raises(InvalidInputError):
            optimize_batches([make_order()], target_weight=target, max_variance_fraction=variance)

    def test_batch_ids_deterministic(self, make_order, as_of):
        orders = [make_order(weight=300, material="SUS316") for _ in range(3)]
        plan = optimize_batches(orders, as_of=as_of)
        assert [b.id for b in plan.batches] == [
            "BATCH-SUS316-001",
            "BATCH-SUS316-002",
            "BATCH-SUS316-003",
        ]
        assert plan.get_batch("BATCH-SUS316-002") is plan.batches[1]
        assert plan.get_batch("missing") is None

    def test_idempotent(self, synthetic_pending, as_of):
        first = optimize_batches(synthetic_pending, as_of=as_of)
        second = optimize_batches(synthetic_pending, as_of=as_of)

        assert first == second

    def test_batches_near_target(self, synthetic_pending, as_of):
        plan = BatchOptimizer(AnalyticsConfig()).optimize(
            synthetic_pending, target_weight=300, max_variance_fraction=0.2, as_of=as_of
        )
        for batch in plan.batches:
            if batch.order_count > 1:
                assert batch.total_weight <= 300 * 1.2 + 1e-9

    def test_configured_defaults(self, make_order, as_of):
        optimizer = BatchOptimizer(AnalyticsConfig(target_batch_weight=500))
        plan = optimizer.optimize([make_order(weight=250)], as_of=as_of)
        assert plan.metadata.target_weight == 500
        assert plan.batches[0].efficiency == pytest.approx(50.0)


class TestAnalyticsService:
    """Tests for the async analytics facade."""

    @pytest.mark.asyncio
    async def test_analyze_runs_both_pipelines(
        self, analytics_service, synthetic_history, synthetic_pending, as_of
    ):
        report = await analytics_service.analyze(
            synthetic_history + synthetic_pending, horizon=3, as_of=as_of, timeout=30
        )

        assert isinstance(report.forecast, ForecastResult)
        assert len(report.forecast.forecast) == 3
        assert report.batch_plan.total_orders_batched == len(synthetic_pending)

    @pytest.mark.asyncio
    async def test_analyze_thin_history(self, analytics_service, make_order, as_of):
        report = await analytics_service.analyze([make_order(weight=300)], as_of=as_of)

        assert isinstance(report.forecast, InsufficientData)
        assert report.batch_plan.total_batches == 1

    @pytest.mark.asyncio
    async def test_forecast_demand(self, analytics_service, monthly_orders):
        result = await analytics_service.forecast_demand(monthly_orders([100.0] * 6), horizon=2)
        assert len(result.forecast) == 2

    @pytest.mark.asyncio
    async def test_plan_batches(self, analytics_service, make_order, as_of):
        plan = await analytics_service.plan_batches(
            [make_order(weight=w) for w in [100, 100, 100, 250]],
            target_weight=300,
            max_variance_fraction=0.2,
            as_of=as_of,
        )
        assert plan.total_batches == 2

    @pytest.mark.asyncio
    async def test_timeout(self, analytics_service, make_order):
        def slow_optimize(*args, **kwargs):
            time.sleep(0.5)

        analytics_service.optimizer.optimize = slow_optimize

        with pytest.raises(asyncio.TimeoutError):
            await analytics_service.plan_batches([make_order()], timeout=0.05)

    @pytest.mark.asyncio
    async def test_failed_pipeline_cancels_sibling(self, analytics_service, make_order, as_of):
        """Test a failing batch plan cancels the still-running forecast."""
        cancelled = []

        async def slow_forecast(*args, **kwargs):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        def failing_optimize(*args, **kwargs):
            raise InvalidInputError("target_weight must be positive")

        analytics_service.forecast_demand = slow_forecast
        analytics_service.optimizer.optimize = failing_optimize

        with pytest.raises(InvalidInputError):
            await analytics_service.analyze([make_order()], as_of=as_of)

        assert cancelled == [True]

    @pytest.mark.asyncio
    async def test_timeout_cancels_sibling(self, analytics_service, make_order):
        cancelled = []

        async def slow_forecast(*args, **kwargs):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        def slow_optimize(*args, **kwargs):
            time.sleep(0.5)

        analytics_service.forecast_demand = slow_forecast
        analytics_service.optimizer.optimize = slow_optimize

        with pytest.raises(asyncio.TimeoutError):
            await analytics_service.analyze([make_order()], timeout=0.05)

        assert cancelled == [True]
