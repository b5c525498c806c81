"""
Domain event models.

These events represent immutable facts about order status updates.
They are consumed by loggers, recorders, and metrics sinks.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class OrderStatusChangedEvent:
    ts_ns: int
    order_id: str
    actor_id: str
    prev_status: str
    next_status: str


@dataclass(frozen=True, slots=True)
class OrderStatusPersistFailedEvent:
    ts_ns: int
    order_id: str
    actor_id: str
    prev_status: str
    next_status: str

    error: str


@dataclass(frozen=True, slots=True)
class NotificationFailedEvent:
    ts_ns: int
    order_id: str
    next_status: str

    recipients: tuple[str, ...]
    error: str


OrderEvent = (
    OrderStatusChangedEvent
    | OrderStatusPersistFailedEvent
    | NotificationFailedEvent
)
