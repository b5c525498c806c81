from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from farm2go.core.domain.types import StatusChangeContext


class StatusNotifier(Protocol):
    """Notification boundary for order status changes.

    Fire-and-observe: the caller logs failures and never treats them as a
    failed transition.
    """

    def notify_status_change(
        self,
        order_id: str,
        new_status: str,
        counterparty_ids: Sequence[str],
        context: StatusChangeContext,
    ) -> None:
        """Deliver the change to every id in ``counterparty_ids``."""
