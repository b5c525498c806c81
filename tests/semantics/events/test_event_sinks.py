"""
Semantic test: event bus and sinks.

Invariant:
Every emitted event reaches every registered sink in registration order.
Closing the bus closes its sinks exactly once and rejects new sinks.
The file recorder writes one JSON object per event, the logging sink
raises failures to WARNING, and the Prometheus sink counts transitions and
failures by status.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from prometheus_client import CollectorRegistry

from farm2go.core.events.event_bus import EventBus
from farm2go.core.events.events import (
    NotificationFailedEvent,
    OrderStatusChangedEvent,
    OrderStatusPersistFailedEvent,
)
from farm2go.core.events.sinks.file_recorder import FileRecorderSink
from farm2go.core.events.sinks.null_event_bus import NullEventBus
from farm2go.core.events.sinks.prometheus_sink import PrometheusEventSink
from farm2go.core.events.sinks.sink_logging import LoggingEventSink

CHANGED = OrderStatusChangedEvent(
    ts_ns=1,
    order_id="o-1",
    actor_id="farmer-1",
    prev_status="pending",
    next_status="confirmed",
)
PERSIST_FAILED = OrderStatusPersistFailedEvent(
    ts_ns=2,
    order_id="o-2",
    actor_id="farmer-1",
    prev_status="confirmed",
    next_status="processing",
    error="timeout",
)
NOTIFY_FAILED = NotificationFailedEvent(
    ts_ns=3,
    order_id="o-1",
    next_status="confirmed",
    recipients=("buyer-1",),
    error="push service down",
)


class _ClosingSink:
    def __init__(self, name: str, log: list[str]) -> None:
        self._name = name
        self._log = log
        self.closed = 0

    def on_event(self, event: object) -> None:
        self._log.append(self._name)

    def close(self) -> None:
        self.closed += 1


def test_bus_dispatches_in_registration_order_and_closes_once() -> None:
    log: list[str] = []
    first = _ClosingSink("first", log)
    second = _ClosingSink("second", log)
    bus = EventBus([first])
    bus.register(second)

    bus.emit(CHANGED)
    bus.close()
    bus.close()

    assert log == ["first", "second"]
    assert first.closed == 1
    assert second.closed == 1
    with pytest.raises(RuntimeError):
        bus.register(_ClosingSink("late", log))


def test_null_bus_accepts_events() -> None:
    bus = NullEventBus()

    bus.emit(CHANGED)
    bus.close()

    assert len(bus.sinks) == 1


def test_file_recorder_writes_json_lines(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "events.jsonl"
    sink = FileRecorderSink(path)

    sink.on_event(CHANGED)
    sink.on_event(NOTIFY_FAILED)
    sink.close()
    sink.close()

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert lines[0] == {
        "ts_ns": 1,
        "order_id": "o-1",
        "actor_id": "farmer-1",
        "prev_status": "pending",
        "next_status": "confirmed",
        "event_type": "OrderStatusChangedEvent",
    }
    assert lines[1]["event_type"] == "NotificationFailedEvent"
    assert lines[1]["recipients"] == ["buyer-1"]


def test_logging_sink_levels(caplog: pytest.LogCaptureFixture) -> None:
    sink = LoggingEventSink(logging.getLogger("farm2go.events.test"))

    with caplog.at_level(logging.INFO, logger="farm2go.events.test"):
        sink.on_event(CHANGED)
        sink.on_event(PERSIST_FAILED)
        sink.on_event(NOTIFY_FAILED)

    assert [(r.levelno, r.event_type) for r in caplog.records] == [
        (logging.INFO, "OrderStatusChangedEvent"),
        (logging.WARNING, "OrderStatusPersistFailedEvent"),
        (logging.WARNING, "NotificationFailedEvent"),
    ]
    assert caplog.records[0].event is CHANGED


def test_prometheus_sink_counts_by_status(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PROMETHEUS_PUSHGATEWAY_URL", raising=False)
    sink = PrometheusEventSink(registry=CollectorRegistry())

    sink.on_event(CHANGED)
    sink.on_event(CHANGED)
    sink.on_event(PERSIST_FAILED)
    sink.on_event(NOTIFY_FAILED)
    sink.close()

    registry = sink.registry
    assert not sink.is_push_enabled()
    assert registry.get_sample_value(
        "farm2go_order_status_transitions_total",
        {"prev_status": "pending", "next_status": "confirmed"},
    ) == 2.0
    assert registry.get_sample_value(
        "farm2go_order_status_persist_failures_total",
        {"next_status": "processing"},
    ) == 1.0
    assert registry.get_sample_value(
        "farm2go_order_notification_failures_total",
        {"next_status": "confirmed"},
    ) == 1.0


def test_prometheus_grouping_key_ignores_bad_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON", "{not json")
    assert PrometheusEventSink._load_grouping_key() == {}

    monkeypatch.setenv(
        "PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON",
        json.dumps({"instance": "batch-1", "attempt": 2}),
    )
    assert PrometheusEventSink._load_grouping_key() == {"instance": "batch-1"}
