"""
Semantic test: persist then notify.

Invariant:
An accepted status change is persisted before the notification
collaborator is called. The notification carries actor, previous and new
status and a human-readable summary. The buyer always hears about the
change; the farmer only when someone else made it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from farm2go.adapters.in_memory import InMemoryNotifier, InMemoryOrderStore
from farm2go.core.domain.types import Order, StatusChangeContext
from farm2go.core.events.event_bus import EventBus
from farm2go.core.events.events import OrderStatusChangedEvent
from farm2go.services.order_status_service import OrderStatusService

FIXED_NOW = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


def _order(status: str = "pending") -> Order:
    return Order(
        id="order-1",
        buyer_id="buyer-1",
        farmer_id="farmer-1",
        product_id="product-1",
        quantity=3,
        total_price=120.0,
        status=status,
        created_at=datetime(2024, 8, 30, tzinfo=timezone.utc),
    )


class _CollectingSink:
    def __init__(self) -> None:
        self.events: list[object] = []

    def on_event(self, event: object) -> None:
        self.events.append(event)


class _OrderCheckingNotifier:
    """Records calls and the stored status at call time."""

    def __init__(self, store: InMemoryOrderStore) -> None:
        self._store = store
        self.calls: list[tuple[str, str, tuple[str, ...], StatusChangeContext, str]] = []

    def notify_status_change(
        self,
        order_id: str,
        new_status: str,
        counterparty_ids: Sequence[str],
        context: StatusChangeContext,
    ) -> None:
        stored = self._store.get(order_id)
        assert stored is not None
        self.calls.append((order_id, new_status, tuple(counterparty_ids), context, stored.status))


def test_farmer_confirmation_is_persisted_before_notification() -> None:
    order = _order()
    store = InMemoryOrderStore([order], clock=lambda: FIXED_NOW)
    notifier = _OrderCheckingNotifier(store)
    sink = _CollectingSink()
    service = OrderStatusService(store=store, notifier=notifier, event_bus=EventBus([sink]))

    updated = service.update_status(
        order,
        "confirmed",
        actor_id="farmer-1",
        buyer_name="Ana",
        farmer_name="Ben",
    )

    assert updated.status == "confirmed"
    assert updated.updated_at == FIXED_NOW
    assert store.get("order-1") == updated

    assert len(notifier.calls) == 1
    order_id, new_status, recipients, context, status_at_notify = notifier.calls[0]
    assert order_id == "order-1"
    assert new_status == "confirmed"
    assert status_at_notify == "confirmed"
    assert recipients == ("buyer-1",)
    assert context.actor_id == "farmer-1"
    assert context.previous_status == "pending"
    assert context.new_status == "confirmed"
    assert context.item_count == 3
    assert context.total_amount == 120.0
    assert context.summary == (
        "Order order-1 pending -> confirmed by farmer-1: "
        "3 item(s) worth ₱120.00 (buyer: Ana, farmer: Ben)"
    )

    assert sink.events == [
        OrderStatusChangedEvent(
            ts_ns=sink.events[0].ts_ns,
            order_id="order-1",
            actor_id="farmer-1",
            prev_status="pending",
            next_status="confirmed",
        )
    ]


def test_buyer_cancellation_notifies_both_parties() -> None:
    order = _order("confirmed")
    store = InMemoryOrderStore([order])
    notifier = InMemoryNotifier()
    service = OrderStatusService(store=store, notifier=notifier, event_bus=EventBus())

    updated = service.cancel_order(order, actor_id="buyer-1", reason="Changed my mind", farmer_name="Ben")

    assert updated.status == "cancelled"
    assert [n.recipient_id for n in notifier.notifications] == ["buyer-1", "farmer-1"]

    buyer_note, farmer_note = notifier.notifications
    assert buyer_note.title == "Order Cancelled"
    assert "please contact Ben" in buyer_note.message
    assert "Reason: Changed my mind" in farmer_note.message
    assert farmer_note.action_url == "/farmer/orders"
    assert buyer_note.sender_id == "buyer-1"
    assert buyer_note.action_data["previousStatus"] == "confirmed"


def test_same_state_request_touches_nothing() -> None:
    order = _order("ready")
    store = InMemoryOrderStore([order])
    notifier = InMemoryNotifier()
    sink = _CollectingSink()
    service = OrderStatusService(store=store, notifier=notifier, event_bus=EventBus([sink]))

    result = service.update_status(order, "ready", actor_id="farmer-1")

    assert result is order
    assert store.get("order-1") is order
    assert notifier.notifications == []
    assert sink.events == []


def test_full_lifecycle_walk() -> None:
    order = _order()
    store = InMemoryOrderStore([order])
    notifier = InMemoryNotifier()
    service = OrderStatusService(store=store, notifier=notifier, event_bus=EventBus())

    for status in ("confirmed", "processing", "ready", "delivered"):
        order = service.update_status(order, status, actor_id="farmer-1")

    assert order.status == "delivered"
    assert [n.title for n in notifier.for_recipient("buyer-1")] == [
        "Order Confirmed",
        "Order Being Prepared",
        "Order Ready for Pickup",
        "Order Delivered",
    ]
    assert notifier.for_recipient("farmer-1") == []
