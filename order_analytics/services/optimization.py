"""
Batch Optimization Service.

Packs pending orders into production batches close to a target weight.
Each material is planned on its own; within a material, orders are taken in
urgency / delivery-date order and filled greedily.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from ..config import AnalyticsConfig, get_config
from ..domain import (
    Batch,
    BatchPlan,
    BatchPlanMetadata,
    DeliveryWindow,
    MaterialBatchResult,
    OrderRecord,
    OverallEfficiency,
    Recommendation,
    RecommendationPriority,
    RecommendationType,
    coerce_orders,
)
from ..errors import InvalidInputError

logger = logging.getLogger(__name__)


def order_urgency(order: OrderRecord, as_of: date) -> int:
    """
    Urgency score from days left until delivery.

    Overdue orders score 10, then 8 (<= 3 days), 6 (<= 7), 4 (<= 14) and 2
    otherwise. Orders without a delivery date score the lowest, 2.
    """
    if order.delivery_date is None:
        return BatchOptimizer.URGENCY_NONE

    days_left = (order.delivery_date - as_of).days
    if days_left < 0:
        return BatchOptimizer.URGENCY_OVERDUE
    for max_days, score in BatchOptimizer.URGENCY_BUCKETS:
        if days_left <= max_days:
            return score
    return BatchOptimizer.URGENCY_NONE


class BatchOptimizer:
    """
    Greedy production batch builder.

    Single pass per material, no backtracking: an order joins the open batch
    if the resulting weight stays within ``max_variance_fraction`` of the
    target (or still short of it), otherwise the open batch is closed and the
    order starts the next one. An empty batch always accepts the next order,
    so oversized orders become batches of their own and no order is ever
    dropped.

    Usage:
        optimizer = BatchOptimizer()
        plan = optimizer.optimize(orders, target_weight=300, max_variance_fraction=0.2)
    """

    URGENCY_OVERDUE = 10
    URGENCY_BUCKETS = ((3, 8), (7, 6), (14, 4))  # (max days left, score)
    URGENCY_NONE = 2

    def __init__(self, config: AnalyticsConfig | None = None):
        self.config = config or get_config()

    def optimize(
        self,
        orders: Iterable[OrderRecord | Mapping[str, Any]],
        target_weight: float | None = None,
        max_variance_fraction: float | None = None,
        consider_delivery_dates: bool = True,
        prioritize_urgent: bool = True,
        as_of: date | None = None,
    ) -> BatchPlan:
        """
        Plan production batches for pending orders.

        Args:
            orders: Order book; only pending orders are batched
            target_weight: Target batch weight in kg (default: config)
            max_variance_fraction: Allowed |weight - target| / target (default: config)
            consider_delivery_dates: Order by delivery date (after urgency)
            prioritize_urgent: Order by descending urgency first
            as_of: Reference date for urgency (default: today)

        Returns:
            BatchPlan with batches, statistics and recommendations
        """
        if target_weight is None:
            target_weight = self.config.target_batch_weight
        if max_variance_fraction is None:
            max_variance_fraction = self.config.max_batch_variance
        if target_weight <= 0:
            raise InvalidInputError(f"target_weight must be positive, got {target_weight}")
        if max_variance_fraction < 0:
            raise InvalidInputError(
                f"max_variance_fraction must not be negative, got {max_variance_fraction}"
            )
        as_of = as_of or date.today()

        pending = [o for o in coerce_orders(orders) if o.is_pending()]
        groups = self._group_by_material(pending)

        by_material: dict[str, MaterialBatchResult] = {}
        for material, material_orders in groups.items():
            by_material[material] = self._optimize_material(
                material,
                material_orders,
                target_weight,
                max_variance_fraction,
                consider_delivery_dates,
                prioritize_urgent,
                as_of,
            )

        batches = [b for result in by_material.values() for b in result.batches]
        recommendations = [r for result in by_material.values() for r in result.recommendations]
        recommendations.extend(self._material_recommendations(by_material))

        logger.info(
            "Planned %d batches for %d pending orders across %d materials",
            len(batches),
            len(pending),
            len(groups),
        )

        return BatchPlan(
            batches=batches,
            by_material=by_material,
            total_batches=len(batches),
            average_efficiency=self._average_efficiency(batches),
            total_weight=sum(b.total_weight for b in batches),
            overall=self._overall_efficiency(batches, target_weight),
            recommendations=recommendations,
            metadata=BatchPlanMetadata(
                total_orders=len(pending),
                materials_analyzed=len(groups),
                target_weight=target_weight,
                max_variance_fraction=max_variance_fraction,
                as_of=as_of,
            ),
        )

    def _group_by_material(self, orders: Sequence[OrderRecord]) -> dict[str, list[OrderRecord]]:
        """Partition orders by material, keeping first-seen material order."""
        groups: dict[str, list[OrderRecord]] = {}
        for order in orders:
            groups.setdefault(order.material_key, []).append(order)
        return groups

    def _sort_orders(
        self,
        orders: Sequence[OrderRecord],
        consider_delivery_dates: bool,
        prioritize_urgent: bool,
        as_of: date,
    ) -> list[OrderRecord]:
        """Stable sort by urgency (desc) then delivery date (asc, undated last)."""

        def sort_key(order: OrderRecord) -> tuple:
            key: tuple = ()
            if prioritize_urgent:
                key += (-order_urgency(order, as_of),)
            if consider_delivery_dates:
                key += (order.delivery_date is None, order.delivery_date or date.max)
            return key

        return sorted(orders, key=sort_key)

    def _optimize_material(
        self,
        material: str,
        orders: Sequence[OrderRecord],
        target_weight: float,
        max_variance: float,
        consider_delivery_dates: bool,
        prioritize_urgent: bool,
        as_of: date,
    ) -> MaterialBatchResult:
        """Greedy batch fill for one material."""
        sorted_orders = self._sort_orders(orders, consider_delivery_dates, prioritize_urgent, as_of)

        groups = self._fill_greedy(sorted_orders, target_weight, max_variance)
        batches = [
            self._create_batch(f"BATCH-{material}-{n:03d}", material, group, target_weight, as_of)
            for n, group in enumerate(groups, start=1)
        ]
        logger.debug("Material %s: %d orders -> %d batches", material, len(orders), len(batches))

        return MaterialBatchResult(
            material=material,
            batches=batches,
            total_batches=len(batches),
            average_efficiency=self._average_efficiency(batches),
            total_weight=sum(b.total_weight for b in batches),
            recommendations=self._batch_recommendations(material, batches),
        )

    def _fill_greedy(
        self,
        orders: Sequence[OrderRecord],
        target_weight: float,
        max_variance: float,
    ) -> list[list[OrderRecord]]:
        """
        Split a sorted order sequence into batches in one pass.

        An order is added when the batch stays within the tolerance band or
        still stays below the target; only overshooting the band closes it.
        """
        groups: list[list[OrderRecord]] = []
        current: list[OrderRecord] = []
        current_weight = 0.0

        for order in orders:
            potential_weight = current_weight + order.total_weight
            variance = abs(potential_weight - target_weight) / target_weight

            if variance <= max_variance or potential_weight < target_weight or not current:
                current.append(order)
                current_weight = potential_weight
            else:
                groups.append(current)
                current = [order]
                current_weight = order.total_weight

        if current:
            groups.append(current)

        return groups

    def _create_batch(
        self,
        batch_id: str,
        material: str,
        orders: Sequence[OrderRecord],
        target_weight: float,
        as_of: date,
    ) -> Batch:
        """Summarize a closed batch."""
        total_weight = sum(o.total_weight for o in orders)
        return Batch(
            id=batch_id,
            material=material,
            orders=tuple(orders),
            total_weight=total_weight,
            target_weight=target_weight,
            efficiency=min(100.0, total_weight / target_weight * 100),
            delivery_window=self._delivery_window(orders),
            urgency=max(order_urgency(o, as_of) for o in orders),
        )

    def _delivery_window(self, orders: Sequence[OrderRecord]) -> DeliveryWindow:
        """Delivery window over orders with a known delivery date."""
        dates = [o.delivery_date for o in orders if o.delivery_date is not None]
        if not dates:
            return DeliveryWindow()
        earliest, latest = min(dates), max(dates)
        return DeliveryWindow(earliest=earliest, latest=latest, span_days=(latest - earliest).days)

    def _batch_recommendations(
        self, material: str, batches: Sequence[Batch]
    ) -> list[Recommendation]:
        """Flag under-filled batches and batches with a wide delivery spread."""
        recommendations = []

        low_efficiency = [b for b in batches if b.efficiency < self.config.low_efficiency_threshold]
        if low_efficiency:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.EFFICIENCY_IMPROVEMENT,
                    priority=RecommendationPriority.MEDIUM,
                    material=material,
                    message=(
                        f"{len(low_efficiency)} {material} batch(es) below "
                        f"{self.config.low_efficiency_threshold:.0f}% efficiency; "
                        "review the order combination"
                    ),
                    affected_batches=[b.id for b in low_efficiency],
                )
            )

        wide_spread = [
            b for b in batches if b.delivery_window.span_days > self.config.max_delivery_span_days
        ]
        if wide_spread:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.DELIVERY_OPTIMIZATION,
                    priority=RecommendationPriority.LOW,
                    material=material,
                    message=(
                        f"{len(wide_spread)} {material} batch(es) span more than "
                        f"{self.config.max_delivery_span_days} days of deliveries"
                    ),
                    affected_batches=[b.id for b in wide_spread],
                )
            )

        return recommendations

    def _material_recommendations(
        self, by_material: Mapping[str, MaterialBatchResult]
    ) -> list[Recommendation]:
        """Flag materials whose average batch efficiency is low."""
        recommendations = []
        for material, result in by_material.items():
            if result.average_efficiency < self.config.material_efficiency_threshold:
                recommendations.append(
                    Recommendation(
                        type=RecommendationType.MATERIAL_EFFICIENCY,
                        priority=RecommendationPriority.HIGH,
                        material=material,
                        message=(
                            f"Average {material} batch efficiency is "
                            f"{result.average_efficiency:.1f}%; adjust order timing "
                            "or the batch size"
                        ),
                        affected_batches=[b.id for b in result.batches],
                    )
                )
        return recommendations

    def _average_efficiency(self, batches: Sequence[Batch]) -> float:
        if not batches:
            return 0.0
        return sum(b.efficiency for b in batches) / len(batches)

    def _overall_efficiency(
        self, batches: Sequence[Batch], target_weight: float
    ) -> OverallEfficiency:
        if not batches:
            return OverallEfficiency()

        total_weight = sum(b.total_weight for b in batches)
        total_capacity = len(batches) * target_weight
        return OverallEfficiency(
            weight_utilization=total_weight / total_capacity * 100,
            average_batch_efficiency=self._average_efficiency(batches),
            total_batches=len(batches),
            wasted_capacity=total_capacity - total_weight,
        )


def optimize_batches(
    orders: Iterable[OrderRecord | Mapping[str, Any]],
    target_weight: float | None = None,
    max_variance_fraction: float | None = None,
    consider_delivery_dates: bool = True,
    prioritize_urgent: bool = True,
    as_of: date | None = None,
) -> BatchPlan:
    """Greedy production batch plan for the pending orders of an order book."""
    return BatchOptimizer().optimize(
        orders,
        target_weight=target_weight,
        max_variance_fraction=max_variance_fraction,
        consider_delivery_dates=consider_delivery_dates,
        prioritize_urgent=prioritize_urgent,
        as_of=as_of,
    )
