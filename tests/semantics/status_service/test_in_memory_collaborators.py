"""
Semantic test: in-memory collaborators.

Invariant:
The store rejects duplicates, unknown orders and unknown statuses with
StorageError and stamps updated_at. The notifier stores one row per
recipient with role-specific wording and tracks read state. A change with
no recipients is a NotificationError; statuses without a message send
nothing.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from farm2go.adapters.in_memory import InMemoryNotifier, InMemoryOrderStore
from farm2go.core.domain.errors import NotificationError, StorageError
from farm2go.core.domain.types import Order, StatusChangeContext
from farm2go.services.order_status_service import status_change_recipients

STAMP = datetime(2024, 9, 2, 9, 0, tzinfo=timezone.utc)


def _order(order_id: str, *, buyer: str = "buyer-1", farmer: str = "farmer-1", day: int = 1) -> Order:
    return Order(
        id=order_id,
        buyer_id=buyer,
        farmer_id=farmer,
        product_id="product-1",
        quantity=1,
        total_price=10.0,
        created_at=datetime(2024, 8, day, tzinfo=timezone.utc),
    )


def _context(new_status: str, *, actor: str = "farmer-1") -> StatusChangeContext:
    return StatusChangeContext(
        order_id="o-1",
        actor_id=actor,
        buyer_id="buyer-1",
        farmer_id="farmer-1",
        previous_status="confirmed",
        new_status=new_status,
        buyer_name="Ana",
        farmer_name="Ben",
        item_count=1,
        total_amount=10.0,
        summary="summary",
    )


def test_store_updates_and_stamps() -> None:
    store = InMemoryOrderStore([_order("o-1")], clock=lambda: STAMP)

    updated = store.update_order_status("o-1", "confirmed")

    assert updated.status == "confirmed"
    assert updated.updated_at == STAMP
    assert store.get("o-1") == updated
    assert len(store) == 1


def test_store_rejects_bad_writes() -> None:
    store = InMemoryOrderStore([_order("o-1")])

    with pytest.raises(StorageError):
        store.add(_order("o-1"))
    with pytest.raises(StorageError) as excinfo:
        store.update_order_status("missing", "confirmed")
    assert excinfo.value.order_id == "missing"
    with pytest.raises(StorageError):
        store.update_order_status("o-1", "shipped")

    assert store.get("o-1").status == "pending"


def test_store_lists_orders_by_role_newest_first() -> None:
    store = InMemoryOrderStore(
        [
            _order("old", day=1),
            _order("new", day=9),
            _order("other", buyer="buyer-2", farmer="farmer-2", day=5),
        ]
    )

    assert [o.id for o in store.list_for_user("buyer-1", "buyer")] == ["new", "old"]
    assert [o.id for o in store.list_for_user("farmer-2", "farmer")] == ["other"]


def test_recipients_follow_actor() -> None:
    order = _order("o-1")

    assert status_change_recipients(order, "farmer-1") == ("buyer-1",)
    assert status_change_recipients(order, "buyer-1") == ("buyer-1", "farmer-1")
    assert status_change_recipients(order, "admin-1") == ("buyer-1", "farmer-1")
    assert status_change_recipients(_order("self", buyer="u-1", farmer="u-1"), "admin-1") == ("u-1",)


def test_notifier_wording_and_read_state() -> None:
    notifier = InMemoryNotifier(clock=lambda: STAMP)

    notifier.notify_status_change("o-1", "ready", ["buyer-1", "farmer-1"], _context("ready", actor="admin-1"))

    buyer_rows = notifier.for_recipient("buyer-1")
    farmer_rows = notifier.for_recipient("farmer-1")
    assert buyer_rows[0].message == "Your order is ready for pickup! Please collect it from Ben."
    assert farmer_rows[0].message == "Order for Ana is ready for pickup."
    assert buyer_rows[0].created_at == STAMP
    assert buyer_rows[0].action_data["orderId"] == "o-1"

    assert notifier.unread_count("buyer-1") == 1
    assert notifier.mark_read(buyer_rows[0].id) is True
    assert notifier.unread_count("buyer-1") == 0
    assert notifier.mark_read("does-not-exist") is False


def test_notifier_requires_recipients() -> None:
    with pytest.raises(NotificationError):
        InMemoryNotifier().notify_status_change("o-1", "ready", [], _context("ready"))


def test_status_without_message_sends_nothing() -> None:
    notifier = InMemoryNotifier()

    notifier.notify_status_change("o-1", "pending", ["buyer-1"], _context("pending"))

    assert notifier.notifications == []
