"""Core shared data models and schemas.

This module defines the canonical Pydantic models used across the order
core: orders, products, status-change context and notifications. The
Order and FilterState shapes mirror the JSON Schemas shipped in
``farm2go/core/schemas``.
"""

# pylint: disable=missing-class-docstring
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Mapping, Union, get_args

from pydantic import BaseModel, ConfigDict, Field

from farm2go.core.domain.purchase_code import PURCHASE_CODE_PATTERN

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

OrderStatus = Literal[
    "pending",
    "confirmed",
    "processing",
    "ready",
    "delivered",
    "cancelled",
]

# Lifecycle order, used for presenting actions and sorting by status.
ORDER_STATUSES: tuple[str, ...] = get_args(OrderStatus)

ProductStatus = Literal["pending", "approved", "rejected"]
UserRole = Literal["buyer", "farmer"]
NotificationType = Literal["order_status_changed"]

# Ephemeral UI-held selections, e.g. {"category": "fruits", "sortBy": "newest"}.
FilterValue = Union[str, bool, None]
FilterState = Mapping[str, FilterValue]


# ---------------------------------------------------------------------------
# Domain records
# ---------------------------------------------------------------------------


class Order(BaseModel):
    """A single buyer purchase of one product line from one farmer.

    The model is frozen: the only way to obtain an order with a different
    status is ``order_state_machine.request_transition``.
    """

    id: str = Field(..., min_length=1)
    buyer_id: str = Field(..., min_length=1)
    farmer_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)

    quantity: int = Field(..., gt=0)
    total_price: float = Field(..., ge=0)

    status: OrderStatus = "pending"

    created_at: datetime
    updated_at: datetime | None = None

    delivery_address: str | None = None
    notes: str | None = None
    purchase_code: str | None = Field(
        default=None,
        pattern=PURCHASE_CODE_PATTERN,
    )

    model_config = ConfigDict(extra="forbid", frozen=True)


class Product(BaseModel):
    id: str = Field(..., min_length=1)
    farmer_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str | None = None

    price: float = Field(..., ge=0)
    unit: str = Field(..., min_length=1)  # e.g. "kg", "bundle", "sack"
    quantity_available: int = Field(..., ge=0)
    category: str = Field(..., min_length=1)

    image_url: str | None = None
    status: ProductStatus = "pending"
    created_at: datetime

    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------------
# Status change notification models
# ---------------------------------------------------------------------------


class StatusChangeContext(BaseModel):
    """Everything the notification collaborator needs to describe a change."""

    order_id: str = Field(..., min_length=1)
    actor_id: str = Field(..., min_length=1)
    buyer_id: str = Field(..., min_length=1)
    farmer_id: str = Field(..., min_length=1)

    previous_status: OrderStatus
    new_status: OrderStatus

    buyer_name: str | None = None
    farmer_name: str | None = None
    reason: str | None = None

    item_count: int = Field(..., ge=0)
    total_amount: float = Field(..., ge=0)

    summary: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class Notification(BaseModel):
    """A notification row as delivered to a single recipient."""

    id: str = Field(..., min_length=1)
    recipient_id: str = Field(..., min_length=1)
    sender_id: str | None = None

    type: NotificationType = "order_status_changed"
    title: str
    message: str

    action_url: str | None = None
    action_data: dict[str, Any] = Field(default_factory=dict)

    read: bool = False
    created_at: datetime

    model_config = ConfigDict(extra="forbid")
