"""In-memory collaborators.

``InMemoryOrderStore`` implements the persistence boundary and doubles as a
record source for the filter pipeline. ``InMemoryNotifier`` turns status
changes into per-recipient notification rows, the way the hosted backend's
notifications table stores them.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Iterable, Sequence

from farm2go.core.domain.errors import NotificationError, StorageError
from farm2go.core.domain.order_state_machine import is_valid_transition
from farm2go.core.domain.types import ORDER_STATUSES, Notification
from farm2go.core.notifications.status_messages import messages_for

if TYPE_CHECKING:
    from farm2go.core.domain.types import Order, StatusChangeContext, UserRole


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryOrderStore:
    """Thread-safe order map keyed by order id."""

    def __init__(
        self,
        orders: Iterable[Order] = (),
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._orders: dict[str, Order] = {}
        self._lock = threading.Lock()
        self._clock = clock
        for order in orders:
            self.add(order)

    def add(self, order: Order) -> None:
        with self._lock:
            if order.id in self._orders:
                raise StorageError(f"Order already exists: {order.id}", order_id=order.id)
            self._orders[order.id] = order

    def get(self, order_id: str) -> Order | None:
        with self._lock:
            return self._orders.get(order_id)

    def update_order_status(self, order_id: str, new_status: str) -> Order:
        if new_status not in ORDER_STATUSES:
            raise StorageError(f"Unknown order status: {new_status}", order_id=order_id)

        with self._lock:
            current = self._orders.get(order_id)
            if current is None:
                raise StorageError(f"Order not found: {order_id}", order_id=order_id)
            if not is_valid_transition(current.status, new_status):
                # The caller validated against a stale copy of the order.
                raise StorageError(
                    f"Stored order {order_id} is {current.status}; "
                    f"cannot move to {new_status}",
                    order_id=order_id,
                )

            updated = current.model_copy(
                update={"status": new_status, "updated_at": self._clock()}
            )
            self._orders[order_id] = updated
            return updated

    def list_for_user(self, user_id: str, role: UserRole) -> list[Order]:
        """Orders where ``user_id`` is the buyer or the farmer, newest first."""
        with self._lock:
            orders = list(self._orders.values())

        if role == "buyer":
            mine = [o for o in orders if o.buyer_id == user_id]
        else:
            mine = [o for o in orders if o.farmer_id == user_id]
        return sorted(mine, key=lambda o: o.created_at, reverse=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)


class InMemoryNotifier:
    """Stores one Notification per recipient of each status change."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self.notifications: list[Notification] = []

    def notify_status_change(
        self,
        order_id: str,
        new_status: str,
        counterparty_ids: Sequence[str],
        context: StatusChangeContext,
    ) -> None:
        if not counterparty_ids:
            raise NotificationError("No recipients for status change", order_id=order_id)

        messages = messages_for(
            new_status,
            buyer_name=context.buyer_name,
            farmer_name=context.farmer_name,
            reason=context.reason,
        )
        if messages is None:
            return

        created: list[Notification] = []
        for recipient_id in counterparty_ids:
            is_buyer = recipient_id == context.buyer_id
            created.append(
                Notification(
                    id=uuid.uuid4().hex,
                    recipient_id=recipient_id,
                    sender_id=context.actor_id,
                    title=messages.buyer_title if is_buyer else messages.farmer_title,
                    message=messages.buyer_message if is_buyer else messages.farmer_message,
                    action_url="/buyer/my-orders" if is_buyer else "/farmer/orders",
                    action_data={
                        "orderId": order_id,
                        "newStatus": new_status,
                        "previousStatus": context.previous_status,
                        "summary": context.summary,
                        "action": "order_status_changed",
                    },
                    created_at=self._clock(),
                )
            )

        with self._lock:
            self.notifications.extend(created)

    def for_recipient(self, recipient_id: str) -> list[Notification]:
        with self._lock:
            return [n for n in self.notifications if n.recipient_id == recipient_id]

    def unread_count(self, recipient_id: str) -> int:
        return sum(1 for n in self.for_recipient(recipient_id) if not n.read)

    def mark_read(self, notification_id: str) -> bool:
        """Mark a notification as read; False if it does not exist."""
        with self._lock:
            for notification in self.notifications:
                if notification.id == notification_id:
                    notification.read = True
                    return True
        return False
