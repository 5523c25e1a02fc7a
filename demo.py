#!/usr/bin/env python3
"""
Order Analytics Demo.

Demonstrates the core capabilities:
1. Synthetic order book generation
2. Monthly aggregation
3. Demand forecasting with seasonality and confidence bounds
4. Production batch optimization
5. Concurrent analysis through the async service
"""

import asyncio
import logging
from datetime import date

from order_analytics import aggregate_orders, build_forecast, optimize_batches
from order_analytics.data.synthetic import OrderBookGenerator
from order_analytics.domain import InsufficientData
from order_analytics.services import AnalyticsService


def print_section(title: str):
    """Print a section header."""
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)


async def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print()
    print("*" * 60)
    print("*  Foundry Demand Forecasting & Batch Optimization       *")
    print("*" * 60)

    today = date.today()

    # 1. Generate synthetic data
    print_section("1. Synthetic Order Book")

    gen = OrderBookGenerator(seed=42)
    history = gen.generate_history(date(today.year - 2, today.month, 1), months=24)
    pending = gen.generate_pending(today, count=40)
    orders = history + pending

    print(f"Historical orders: {len(history)}")
    print(f"Pending orders:    {len(pending)}")

    # 2. Aggregation
    print_section("2. Monthly Aggregation (last 6 months)")

    periods = aggregate_orders(orders)
    for p in periods[-6:]:
        flag = " (outlier)" if p.is_outlier else ""
        print(f"  {p.period}: {p.order_count:3d} orders, {p.total_weight:8.1f} kg{flag}")

    # 3. Forecasting
    print_section("3. Demand Forecast")

    result = build_forecast(orders, horizon=6)
    if isinstance(result, InsufficientData):
        print(f"Not enough history: {result.actual}/{result.required} months")
    else:
        trend = result.trend
        print(
            f"Trend: {trend.direction.value} ({trend.strength.value}), "
            f"slope {trend.slope:.1f} kg/month, R^2 {trend.r_squared:.2f}"
        )
        if result.seasonality and result.seasonality.is_available:
            peaks = ", ".join(str(m.month) for m in result.seasonality.peak_months)
            print(f"Seasonality: {result.seasonality.strength.value}, peak months {peaks}")
        if result.accuracy.mape is not None:
            print(
                f"Naive backtest: MAPE {result.accuracy.mape:.1f}% "
                f"({result.accuracy.accuracy.value})"
            )
        print()
        for point in result.forecast:
            print(
                f"  {point.period}: {point.forecast_value:8.1f} kg "
                f"(95% CI: {point.lower_bound:.0f} - {point.upper_bound:.0f})"
            )

    # 4. Batch optimization
    print_section("4. Production Batches")

    plan = optimize_batches(orders, target_weight=300, max_variance_fraction=0.2, as_of=today)
    print(f"Batches: {plan.total_batches}, average efficiency {plan.average_efficiency:.1f}%")
    print(f"Wasted capacity: {plan.overall.wasted_capacity:.0f} kg")
    print()
    for batch in plan.batches[:5]:
        window = batch.delivery_window
        print(
            f"  {batch.id:20} {batch.order_count:2d} orders "
            f"{batch.total_weight:6.1f} kg  {batch.efficiency:5.1f}%  "
            f"urgency {batch.urgency:2d}  deliver {window.earliest} .. {window.latest}"
        )
    if plan.recommendations:
        print()
        for rec in plan.recommendations:
            print(f"  [{rec.priority.value.upper():6}] {rec.message}")

    # 5. Concurrent analysis
    print_section("5. Concurrent Analysis")

    service = AnalyticsService()
    report = await service.analyze(orders, horizon=3, as_of=today, timeout=10.0)
    forecast_months = (
        0 if isinstance(report.forecast, InsufficientData) else len(report.forecast.forecast)
    )
    print(f"Forecast months: {forecast_months}")
    print(f"Batches planned: {report.batch_plan.total_batches}")

    print()
    print("=" * 60)
    print("  Demo Complete!")
    print("=" * 60)
    print()


if __name__ == "__main__":
    asyncio.run(main())
