"""
Production batch domain models.

A batch groups pending orders of one material that are produced together.
Batches hold references to the caller's ``OrderRecord`` objects; nothing is
copied.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, computed_field

from .order import OrderRecord


class RecommendationPriority(str, Enum):
    """Priority level for batch plan recommendations."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecommendationType(str, Enum):
    """Type of recommendation."""

    EFFICIENCY_IMPROVEMENT = "efficiency_improvement"  # Batch under 70% full
    DELIVERY_OPTIMIZATION = "delivery_optimization"  # Delivery window > 14 days
    MATERIAL_EFFICIENCY = "material_efficiency"  # Material average under 75%


class DeliveryWindow(BaseModel):
    """Span of delivery dates covered by a batch."""

    earliest: date | None = None
    latest: date | None = None
    span_days: int = 0

    model_config = {"frozen": True}


class Batch(BaseModel):
    """A group of same-material orders sized near the target weight."""

    id: str
    material: str
    orders: tuple[OrderRecord, ...]
    total_weight: float = Field(ge=0)
    target_weight: float = Field(gt=0)
    efficiency: float = Field(ge=0, le=100)  # % of target weight filled
    delivery_window: DeliveryWindow
    urgency: int

    model_config = {"frozen": True}

    @computed_field
    @property
    def order_count(self) -> int:
        return len(self.orders)

    @computed_field
    @property
    def order_ids(self) -> list[str]:
        return [o.id for o in self.orders]


class Recommendation(BaseModel):
    """Actionable note about a batch plan."""

    type: RecommendationType
    priority: RecommendationPriority
    message: str
    material: str | None = None
    affected_batches: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class MaterialBatchResult(BaseModel):
    """Batches and statistics for a single material."""

    material: str
    batches: list[Batch] = Field(default_factory=list)
    total_batches: int = 0
    average_efficiency: float = 0.0
    total_weight: float = 0.0
    recommendations: list[Recommendation] = Field(default_factory=list)

    model_config = {"frozen": True}


class OverallEfficiency(BaseModel):
    """Capacity usage across every batch in a plan."""

    weight_utilization: float = 0.0  # total weight / (batches x target) in %
    average_batch_efficiency: float = 0.0
    total_batches: int = 0
    wasted_capacity: float = 0.0  # kg of unused target capacity

    model_config = {"frozen": True}


class BatchPlanMetadata(BaseModel):
    """Context of a batch optimization run."""

    total_orders: int
    materials_analyzed: int
    target_weight: float
    max_variance_fraction: float
    as_of: date

    model_config = {"frozen": True}


class BatchPlan(BaseModel):
    """
    Result of batch optimization over all pending orders.

    ``batches`` lists every batch in material order; ``by_material`` holds the
    same batches grouped per material with material-level statistics.
    """

    batches: list[Batch] = Field(default_factory=list)
    by_material: dict[str, MaterialBatchResult] = Field(default_factory=dict)
    total_batches: int = 0
    average_efficiency: float = 0.0
    total_weight: float = 0.0
    overall: OverallEfficiency = Field(default_factory=OverallEfficiency)
    recommendations: list[Recommendation] = Field(default_factory=list)
    metadata: BatchPlanMetadata

    model_config = {"frozen": True}

    @computed_field
    @property
    def total_orders_batched(self) -> int:
        return sum(b.order_count for b in self.batches)

    def get_batch(self, batch_id: str) -> Batch | None:
        """Look up a batch by id."""
        for batch in self.batches:
            if batch.id == batch_id:
                return batch
        return None
