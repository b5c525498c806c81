"""Event bus for callers that do not observe order events."""
from __future__ import annotations

from typing import TYPE_CHECKING

from farm2go.core.events.event_bus import EventBus

if TYPE_CHECKING:
    from farm2go.core.events.events import OrderEvent


class _NullSink:
    """Drops order events."""

    def on_event(self, event: OrderEvent) -> None:
        return


class NullEventBus(EventBus):
    """Bus for library use and tests where nobody watches status changes."""

    def __init__(self) -> None:
        super().__init__(sinks=[_NullSink()])
