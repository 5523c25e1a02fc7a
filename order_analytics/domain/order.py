"""
Order domain models.

Orders are the only input of the analytics core. They arrive from the
surrounding order-management application either as ``OrderRecord`` instances
or as plain mappings using that application's camelCase keys.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from ..errors import InvalidInputError

UNKNOWN_MATERIAL = "unknown"


class OrderStatus(str, Enum):
    """Order lifecycle status."""

    PENDING = "pending"  # Waiting for production
    PROCESSING = "processing"  # On the shop floor
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _to_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        # ISO timestamps from the UI layer, e.g. 2024-03-01T09:30:00Z
        return value[:10]
    return value


class OrderRecord(BaseModel):
    """
    A single manufacturing order.

    Weight is the only quantity the forecasting and batching pipelines use.
    ``quantity`` and ``unit_price`` are optional and only feed the revenue
    column of the monthly aggregation.
    """

    id: str
    material: str | None = None
    customer: str | None = None
    order_date: date = Field(validation_alias=AliasChoices("order_date", "orderDate"))
    delivery_date: date | None = Field(
        default=None, validation_alias=AliasChoices("delivery_date", "deliveryDate")
    )
    total_weight: float = Field(
        default=0.0, ge=0, validation_alias=AliasChoices("total_weight", "totalWeight")
    )
    status: OrderStatus = OrderStatus.PENDING
    quantity: float | None = None
    unit_price: float | None = Field(
        default=None, validation_alias=AliasChoices("unit_price", "unitPrice")
    )

    model_config = {"frozen": True}

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Numeric ids from spreadsheets are accepted as strings."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("total_weight", mode="before")
    @classmethod
    def coerce_weight(cls, v: Any) -> Any:
        """Missing or non-finite weights count as zero."""
        if v is None or v == "":
            return 0.0
        try:
            weight = float(v)
        except (TypeError, ValueError):
            return v
        if math.isnan(weight) or math.isinf(weight):
            return 0.0
        return weight

    @field_validator("order_date", mode="before")
    @classmethod
    def coerce_order_date(cls, v: Any) -> Any:
        return _to_date(v)

    @field_validator("delivery_date", mode="before")
    @classmethod
    def coerce_delivery_date(cls, v: Any) -> date | None:
        """
        Unparsable delivery dates become ``None``.

        An order without a usable delivery date gets the lowest urgency and
        is left out of batch delivery windows.
        """
        v = _to_date(v)
        if v is None or v == "":
            return None
        if isinstance(v, date):
            return v
        if isinstance(v, str):
            try:
                return date.fromisoformat(v)
            except ValueError:
                return None
        return None

    @property
    def material_key(self) -> str:
        """Material code used for batching; blank materials share one bucket."""
        if self.material is None or not self.material.strip():
            return UNKNOWN_MATERIAL
        return self.material

    @property
    def revenue(self) -> float:
        """Line revenue (unit price x quantity), zero when either is unknown."""
        if self.unit_price is None or self.quantity is None:
            return 0.0
        return self.unit_price * self.quantity

    def is_pending(self) -> bool:
        """Check if the order still waits for production."""
        return self.status == OrderStatus.PENDING


def coerce_orders(orders: Iterable[OrderRecord | Mapping[str, Any]]) -> list[OrderRecord]:
    """
    Validate an order collection into ``OrderRecord`` instances.

    Existing records are passed through untouched so callers keep identity
    with the objects they supplied.

    Raises:
        InvalidInputError: if a mapping cannot be validated
    """
    records = []
    for index, order in enumerate(orders):
        if isinstance(order, OrderRecord):
            records.append(order)
            continue
        try:
            records.append(OrderRecord.model_validate(order))
        except ValidationError as exc:
            raise InvalidInputError(str(exc), index=index) from exc
    return records
