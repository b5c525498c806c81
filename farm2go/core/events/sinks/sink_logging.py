"""
Logging event sink.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from farm2go.core.events.events import (
    NotificationFailedEvent,
    OrderStatusPersistFailedEvent,
)

if TYPE_CHECKING:
    from farm2go.core.events.events import OrderEvent


class LoggingEventSink:
    """Logs order events; failures at WARNING, everything else at INFO."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def on_event(self, event: OrderEvent) -> None:
        level = logging.INFO
        if isinstance(event, (NotificationFailedEvent, OrderStatusPersistFailedEvent)):
            level = logging.WARNING
        self._logger.log(
            level,
            "domain_event",
            extra={"event": event, "event_type": type(event).__name__},
        )
