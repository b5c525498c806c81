from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, push_to_gateway

from farm2go.core.events.events import (
    NotificationFailedEvent,
    OrderStatusChangedEvent,
    OrderStatusPersistFailedEvent,
)

if TYPE_CHECKING:
    from farm2go.core.events.events import OrderEvent

LOGGER = logging.getLogger(__name__)


class PrometheusEventSink:
    """Counts order events in a private Prometheus registry.

    Expected environment (optional):
    - PROMETHEUS_PUSHGATEWAY_URL: URL to the Pushgateway. When set, the
      counters are pushed once on close(), which suits batch CLI runs.
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object used as grouping
      key, e.g. {"instance": "farm2go-batch-1"}.

    Pushing is best-effort: failures are logged and never raised.
    """

    def __init__(
        self,
        *,
        registry: CollectorRegistry | None = None,
        job: str = "farm2go",
    ) -> None:
        self._registry = registry if registry is not None else CollectorRegistry()
        self._job = job
        self._pushgateway_url = os.environ.get("PROMETHEUS_PUSHGATEWAY_URL")
        self._grouping_key = self._load_grouping_key()
        self._closed = False

        self._transitions = Counter(
            "farm2go_order_status_transitions",
            "Persisted order status transitions.",
            labelnames=["prev_status", "next_status"],
            registry=self._registry,
        )
        self._persist_failures = Counter(
            "farm2go_order_status_persist_failures",
            "Order status updates rejected by storage.",
            labelnames=["next_status"],
            registry=self._registry,
        )
        self._notification_failures = Counter(
            "farm2go_order_notification_failures",
            "Status change notifications that could not be delivered.",
            labelnames=["next_status"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def is_push_enabled(self) -> bool:
        return self._pushgateway_url is not None

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON")
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning(
                "Invalid PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON; ignoring"
            )
            return {}

        if not isinstance(data, dict):
            return {}

        return {
            key: value
            for key, value in data.items()
            if isinstance(key, str) and isinstance(value, str)
        }

    def on_event(self, event: OrderEvent) -> None:
        if isinstance(event, OrderStatusChangedEvent):
            self._transitions.labels(
                prev_status=event.prev_status,
                next_status=event.next_status,
            ).inc()
        elif isinstance(event, OrderStatusPersistFailedEvent):
            self._persist_failures.labels(next_status=event.next_status).inc()
        elif isinstance(event, NotificationFailedEvent):
            self._notification_failures.labels(next_status=event.next_status).inc()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        if not self._pushgateway_url:
            return

        try:
            push_to_gateway(
                gateway=self._pushgateway_url,
                job=self._job,
                registry=self._registry,
                grouping_key=self._grouping_key,
            )
        except Exception:
            LOGGER.exception("Prometheus push failed")
            return

        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": self._job, "grouping_key": self._grouping_key},
        )
