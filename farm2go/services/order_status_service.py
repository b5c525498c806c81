"""Order status update service.

The service is the caller of the order state machine. It validates the
requested transition, persists it, emits events, and informs the parties.

Persistence and notification are not transactional:
- a storage failure aborts before anything is sent;
- a notification failure is logged and reported as an event, but the
  persisted status change stands and is returned.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from farm2go.core.domain.errors import StorageError
from farm2go.core.domain.order_state_machine import request_transition
from farm2go.core.domain.types import StatusChangeContext
from farm2go.core.events.events import (
    NotificationFailedEvent,
    OrderStatusChangedEvent,
    OrderStatusPersistFailedEvent,
)
from farm2go.core.notifications.status_messages import build_summary

if TYPE_CHECKING:
    from farm2go.core.domain.types import Order
    from farm2go.core.events.event_bus import EventBus
    from farm2go.core.ports.notifier import StatusNotifier
    from farm2go.core.ports.order_store import OrderStore

LOGGER = logging.getLogger(__name__)


def status_change_recipients(order: Order, actor_id: str) -> tuple[str, ...]:
    """Buyer always hears about a change; the farmer only if someone else made it."""
    recipients = [order.buyer_id]
    if actor_id != order.farmer_id and order.farmer_id != order.buyer_id:
        recipients.append(order.farmer_id)
    return tuple(recipients)


class OrderStatusService:
    """Validate, persist and announce order status changes."""

    def __init__(
        self,
        store: OrderStore,
        notifier: StatusNotifier,
        event_bus: EventBus,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._event_bus = event_bus

    def update_status(
        self,
        order: Order,
        target_status: str,
        *,
        actor_id: str,
        buyer_name: str | None = None,
        farmer_name: str | None = None,
        reason: str | None = None,
    ) -> Order:
        """Move ``order`` to ``target_status`` on behalf of ``actor_id``.

        Raises:
            InvalidTransition: the edge is not allowed. Nothing is persisted,
                emitted or sent.
            StorageError: the store rejected the update. Nothing is sent.
        """
        requested = request_transition(order, target_status)
        if requested is order:
            LOGGER.debug(
                "Order status unchanged; skipping update",
                extra={"order_id": order.id, "status": order.status},
            )
            return order

        previous_status = order.status

        try:
            persisted = self._store.update_order_status(order.id, target_status)
        except StorageError as exc:
            LOGGER.error(
                "Order status update failed",
                extra={
                    "order_id": order.id,
                    "prev_status": previous_status,
                    "next_status": target_status,
                },
            )
            self._event_bus.emit(
                OrderStatusPersistFailedEvent(
                    ts_ns=time.time_ns(),
                    order_id=order.id,
                    actor_id=actor_id,
                    prev_status=previous_status,
                    next_status=target_status,
                    error=str(exc),
                )
            )
            raise

        self._event_bus.emit(
            OrderStatusChangedEvent(
                ts_ns=time.time_ns(),
                order_id=order.id,
                actor_id=actor_id,
                prev_status=previous_status,
                next_status=target_status,
            )
        )

        context = StatusChangeContext(
            order_id=order.id,
            actor_id=actor_id,
            buyer_id=order.buyer_id,
            farmer_id=order.farmer_id,
            previous_status=previous_status,
            new_status=target_status,
            buyer_name=buyer_name,
            farmer_name=farmer_name,
            reason=reason,
            item_count=order.quantity,
            total_amount=order.total_price,
            summary=build_summary(
                order_id=order.id,
                actor_id=actor_id,
                previous_status=previous_status,
                new_status=target_status,
                item_count=order.quantity,
                total_amount=order.total_price,
                buyer_name=buyer_name,
                farmer_name=farmer_name,
            ),
        )
        self._notify(context, status_change_recipients(order, actor_id))

        return persisted

    def cancel_order(
        self,
        order: Order,
        *,
        actor_id: str,
        reason: str | None = None,
        buyer_name: str | None = None,
        farmer_name: str | None = None,
    ) -> Order:
        """Cancel a pending or confirmed order."""
        return self.update_status(
            order,
            "cancelled",
            actor_id=actor_id,
            buyer_name=buyer_name,
            farmer_name=farmer_name,
            reason=reason,
        )

    def _notify(self, context: StatusChangeContext, recipients: tuple[str, ...]) -> None:
        # --- Notification (side-effect only) ---
        try:
            self._notifier.notify_status_change(
                context.order_id,
                context.new_status,
                recipients,
                context,
            )
        except Exception as exc:
            LOGGER.exception(
                "Order status notification failed",
                extra={"order_id": context.order_id, "next_status": context.new_status},
            )
            self._event_bus.emit(
                NotificationFailedEvent(
                    ts_ns=time.time_ns(),
                    order_id=context.order_id,
                    next_status=context.new_status,
                    recipients=recipients,
                    error=str(exc),
                )
            )
