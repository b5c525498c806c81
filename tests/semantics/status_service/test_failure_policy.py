"""
Semantic test: partial-failure policy.

Invariant:
- InvalidTransition: no store call, no notification, no event.
- StorageError: propagated unchanged, notifier never called.
- Notification failure: logged and reported as an event; the persisted
  change stands and is returned.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Sequence

import pytest

from farm2go.adapters.in_memory import InMemoryOrderStore
from farm2go.core.domain.errors import InvalidTransition, NotificationError, StorageError
from farm2go.core.domain.types import Order, StatusChangeContext
from farm2go.core.events.event_bus import EventBus
from farm2go.core.events.events import (
    NotificationFailedEvent,
    OrderStatusChangedEvent,
    OrderStatusPersistFailedEvent,
)
from farm2go.services.order_status_service import OrderStatusService


def _order(status: str = "pending") -> Order:
    return Order(
        id="order-7",
        buyer_id="buyer-1",
        farmer_id="farmer-1",
        product_id="product-1",
        quantity=2,
        total_price=75.5,
        status=status,
        created_at=datetime(2024, 8, 30, tzinfo=timezone.utc),
    )


class _CollectingSink:
    def __init__(self) -> None:
        self.events: list[object] = []

    def on_event(self, event: object) -> None:
        self.events.append(event)


class _RecordingNotifier:
    def __init__(self, error: Exception | None = None) -> None:
        self._error = error
        self.calls: list[str] = []

    def notify_status_change(
        self,
        order_id: str,
        new_status: str,
        counterparty_ids: Sequence[str],
        context: StatusChangeContext,
    ) -> None:
        self.calls.append(new_status)
        if self._error is not None:
            raise self._error


class _RecordingStore:
    def __init__(self, error: StorageError | None = None) -> None:
        self._error = error
        self.calls: list[tuple[str, str]] = []

    def update_order_status(self, order_id: str, new_status: str) -> Order:
        self.calls.append((order_id, new_status))
        if self._error is not None:
            raise self._error
        return _order(new_status)


def test_invalid_transition_has_no_side_effects() -> None:
    store = _RecordingStore()
    notifier = _RecordingNotifier()
    sink = _CollectingSink()
    service = OrderStatusService(store=store, notifier=notifier, event_bus=EventBus([sink]))

    with pytest.raises(InvalidTransition):
        service.update_status(_order("processing"), "cancelled", actor_id="buyer-1")

    assert store.calls == []
    assert notifier.calls == []
    assert sink.events == []


def test_storage_error_propagates_and_skips_notification() -> None:
    error = StorageError("connection reset", order_id="order-7")
    store = _RecordingStore(error=error)
    notifier = _RecordingNotifier()
    sink = _CollectingSink()
    service = OrderStatusService(store=store, notifier=notifier, event_bus=EventBus([sink]))

    with pytest.raises(StorageError) as excinfo:
        service.update_status(_order(), "confirmed", actor_id="farmer-1")

    assert excinfo.value is error
    assert store.calls == [("order-7", "confirmed")]
    assert notifier.calls == []
    assert len(sink.events) == 1
    failed = sink.events[0]
    assert isinstance(failed, OrderStatusPersistFailedEvent)
    assert failed.error == "connection reset"
    assert failed.next_status == "confirmed"


def test_missing_order_in_store_is_storage_error() -> None:
    store = InMemoryOrderStore()
    notifier = _RecordingNotifier()
    service = OrderStatusService(store=store, notifier=notifier, event_bus=EventBus())

    with pytest.raises(StorageError):
        service.update_status(_order(), "confirmed", actor_id="farmer-1")

    assert notifier.calls == []


@pytest.mark.parametrize(
    "error",
    [NotificationError("push service down"), RuntimeError("unexpected")],
)
def test_notification_failure_does_not_fail_update(
    error: Exception,
    caplog: pytest.LogCaptureFixture,
) -> None:
    store = _RecordingStore()
    notifier = _RecordingNotifier(error=error)
    sink = _CollectingSink()
    service = OrderStatusService(store=store, notifier=notifier, event_bus=EventBus([sink]))

    with caplog.at_level(logging.ERROR, logger="farm2go.services.order_status_service"):
        updated = service.update_status(_order(), "confirmed", actor_id="farmer-1")

    assert updated.status == "confirmed"
    assert store.calls == [("order-7", "confirmed")]
    assert notifier.calls == ["confirmed"]

    assert [type(e) for e in sink.events] == [OrderStatusChangedEvent, NotificationFailedEvent]
    failure = sink.events[1]
    assert failure.recipients == ("buyer-1",)
    assert failure.error == str(error)

    assert any(
        record.message == "Order status notification failed" and record.exc_info
        for record in caplog.records
    )
