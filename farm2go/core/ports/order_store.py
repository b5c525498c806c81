"""Persistence collaborator protocol.

The order status service writes every accepted transition through this
boundary. Concrete implementations adapt a backend table or an in-memory
map to it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from farm2go.core.domain.types import Order


class OrderStore(Protocol):
    """Order persistence boundary.

    Implementations must update the status field atomically per order and
    raise StorageError on failure. The write is conditional: if the stored
    status cannot move to ``new_status`` in one allowed step, nothing is
    written and StorageError is raised. Errors are surfaced verbatim to the
    caller.
    """

    def update_order_status(self, order_id: str, new_status: str) -> Order:
        """Persist ``new_status`` and return the stored order."""
