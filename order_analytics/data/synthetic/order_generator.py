"""
Order book generator for synthetic data.

Generates realistic foundry order books with:
- Material mix weighted towards stainless grades
- Linear demand growth
- Annual seasonality (summer slowdown, pre-year-end rush)
- Random order weights and delivery lead times
"""

import math
from datetime import date, timedelta

import numpy as np

from ...domain import OrderRecord, OrderStatus


class OrderBookGenerator:
    """
    Generate synthetic order books.

    Monthly demand follows:

        weight(t) = base * (1 + growth * t) * season(month) * noise

    and is split into individual orders of random size.
    """

    # Material codes and their share of orders
    MATERIALS = {
        "SUS304": 0.35,
        "SUS316": 0.20,
        "SCS": 0.20,
        "S14": 0.15,
        "FCD400": 0.10,
    }

    CUSTOMERS = ["Kobayashi Valve", "Tokai Pump", "Meiwa Industries", "Hokuto Marine"]

    # Seasonal multipliers by calendar month
    SEASONAL_PATTERN = {
        1: 0.85,   # New year shutdown
        2: 0.95,
        3: 1.15,   # Fiscal year end
        4: 1.00,
        5: 0.90,   # Golden week
        6: 1.00,
        7: 1.05,
        8: 0.80,   # Obon
        9: 1.10,
        10: 1.05,
        11: 1.05,
        12: 1.10,  # Year-end rush
    }

    def __init__(self, seed: int | None = None):
        """Initialize generator with optional random seed."""
        self.rng = np.random.default_rng(seed)
        self._counter = 0

    def _next_id(self) -> str:
        self._counter += 1
        return f"ORD-{self._counter:06d}"

    def _pick_material(self) -> str:
        materials = list(self.MATERIALS)
        weights = np.array(list(self.MATERIALS.values()))
        return str(self.rng.choice(materials, p=weights / weights.sum()))

    def generate_history(
        self,
        start: date,
        months: int = 24,
        base_monthly_weight: float = 3000.0,
        monthly_growth: float = 0.01,
        seasonality: bool = True,
        noise: float = 0.05,
        mean_order_weight: float = 120.0,
    ) -> list[OrderRecord]:
        """
        Generate completed historical orders.

        Args:
            start: First month of history (day is ignored)
            months: Number of months to generate
            base_monthly_weight: Average monthly weight in kg at start
            monthly_growth: Relative growth per month
            seasonality: Apply the seasonal pattern
            noise: Relative standard deviation of monthly weight
            mean_order_weight: Average order size in kg

        Returns:
            List of OrderRecord objects with status completed
        """
        orders = []
        year, month = start.year, start.month

        for t in range(months):
            target = base_monthly_weight * (1 + monthly_growth * t)
            if seasonality:
                target *= self.SEASONAL_PATTERN[month]
            target *= max(0.0, self.rng.normal(1.0, noise))

            orders.extend(self._orders_for_month(year, month, target, mean_order_weight))

            month += 1
            if month > 12:
                month = 1
                year += 1

        return orders

    def _orders_for_month(
        self, year: int, month: int, target_weight: float, mean_order_weight: float
    ) -> list[OrderRecord]:
        """Split a month's weight into orders."""
        n_orders = max(1, int(round(target_weight / mean_order_weight)))
        shares = self.rng.dirichlet(np.ones(n_orders))
        days_in_month = (date(year + month // 12, month % 12 + 1, 1) - date(year, month, 1)).days

        orders = []
        for share in shares:
            order_date = date(year, month, int(self.rng.integers(1, days_in_month + 1)))
            lead_time = int(self.rng.integers(14, 60))
            quantity = int(self.rng.integers(1, 50))
            orders.append(
                OrderRecord(
                    id=self._next_id(),
                    material=self._pick_material(),
                    customer=str(self.rng.choice(self.CUSTOMERS)),
                    order_date=order_date,
                    delivery_date=order_date + timedelta(days=lead_time),
                    total_weight=round(float(target_weight * share), 2),
                    status=OrderStatus.COMPLETED,
                    quantity=quantity,
                    unit_price=round(float(self.rng.uniform(800, 4000)), 0),
                )
            )
        return orders

    def generate_pending(
        self,
        as_of: date,
        count: int = 30,
        mean_order_weight: float = 90.0,
        overdue_rate: float = 0.1,
    ) -> list[OrderRecord]:
        """
        Generate open orders waiting for production.

        Args:
            as_of: Reference date; delivery dates are spread around it
            count: Number of orders
            mean_order_weight: Average order weight in kg (gamma distributed)
            overdue_rate: Share of orders already past their delivery date

        Returns:
            List of pending OrderRecord objects
        """
        orders = []
        for _ in range(count):
            if self.rng.random() < overdue_rate:
                days_to_delivery = -int(self.rng.integers(1, 10))
            else:
                days_to_delivery = int(self.rng.integers(1, 45))

            weight = float(self.rng.gamma(shape=2.0, scale=mean_order_weight / 2.0))
            orders.append(
                OrderRecord(
                    id=self._next_id(),
                    material=self._pick_material(),
                    customer=str(self.rng.choice(self.CUSTOMERS)),
                    order_date=as_of - timedelta(days=int(self.rng.integers(1, 30))),
                    delivery_date=as_of + timedelta(days=days_to_delivery),
                    total_weight=round(math.ceil(weight * 10) / 10, 1),
                    status=OrderStatus.PENDING,
                )
            )
        return orders
