"""
Monthly order aggregation.

Buckets orders by calendar month of their order date and flags outlier
months with a population z-score. Outliers are annotated, never removed:
a spike month is still real demand.
"""

from collections.abc import Iterable

import numpy as np
import pandas as pd
from scipy import stats

from ..domain import OrderRecord, PeriodSummary


def filter_orders(
    orders: Iterable[OrderRecord],
    material: str | None = None,
    customer: str | None = None,
) -> list[OrderRecord]:
    """Exact-match filter on material and customer; ``None`` disables a filter."""
    selected = []
    for order in orders:
        if material is not None and order.material != material:
            continue
        if customer is not None and order.customer != customer:
            continue
        selected.append(order)
    return selected


def aggregate_by_month(
    orders: Iterable[OrderRecord],
    material: str | None = None,
    customer: str | None = None,
    outlier_z_threshold: float = 3.0,
) -> list[PeriodSummary]:
    """
    Aggregate orders into monthly period summaries.

    Args:
        orders: Order records (any status)
        material: Only aggregate orders of this material
        customer: Only aggregate orders of this customer
        outlier_z_threshold: |z| above which a month is flagged

    Returns:
        PeriodSummary list sorted by period, one per month present in input
    """
    selected = filter_orders(orders, material, customer)
    if not selected:
        return []

    frame = pd.DataFrame(
        {
            "period": [o.order_date.strftime("%Y-%m") for o in selected],
            "total_weight": [o.total_weight for o in selected],
            "revenue": [o.revenue for o in selected],
        }
    )

    monthly = (
        frame.groupby("period", sort=True)
        .agg(
            order_count=("total_weight", "size"),
            total_weight=("total_weight", "sum"),
            total_revenue=("revenue", "sum"),
        )
        .reset_index()
    )

    weights = monthly["total_weight"].to_numpy(dtype=float)
    if len(weights) > 1 and np.std(weights) > 0:
        z_scores = stats.zscore(weights, ddof=0)
    else:
        # A single month or flat history has no spread to score against
        z_scores = np.zeros(len(weights))

    return [
        PeriodSummary(
            period=row.period,
            order_count=int(row.order_count),
            total_weight=float(row.total_weight),
            total_revenue=float(row.total_revenue),
            z_score=float(z),
            is_outlier=bool(abs(z) > outlier_z_threshold),
        )
        for row, z in zip(monthly.itertuples(index=False), z_scores)
    ]


def weights_of(periods: Iterable[PeriodSummary]) -> np.ndarray:
    """Total weight series of a period list."""
    return np.array([p.total_weight for p in periods], dtype=float)
