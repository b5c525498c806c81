"""
In-process fan-out of order status events.

The status service emits on the caller's thread; a slow sink delays the
status update that produced the event.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from farm2go.core.events.event_sink import EventSink
    from farm2go.core.events.events import OrderEvent


class EventBus:
    """Hands each order event to every sink, first registered first."""

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks) if sinks is not None else []
        self._closed = False

    @property
    def sinks(self) -> tuple[EventSink, ...]:
        return tuple(self._sinks)

    def register(self, sink: EventSink) -> None:
        """Add ``sink``; it receives events emitted from now on."""
        if self._closed:
            raise RuntimeError("Cannot register a sink on a closed EventBus")
        self._sinks.append(sink)

    def emit(self, event: OrderEvent) -> None:
        """Deliver ``event`` to each sink. Sink errors propagate to the emitter."""
        for sink in self._sinks:
            sink.on_event(event)

    def close(self) -> None:
        """Close sinks that hold files or push metrics. Safe to call twice."""
        if self._closed:
            return

        for sink in self._sinks:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()

        self._closed = True
