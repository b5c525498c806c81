"""
Consumer side of the order event bus.

A sink may also define ``close()``; the bus calls it once at shutdown.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from farm2go.core.events.events import OrderEvent


class EventSink(Protocol):
    def on_event(self, event: OrderEvent) -> None:
        """Record, log or count one status change or failure."""
