"""Application configuration models.

Configuration is read from a JSON or TOML file and validated with Pydantic.
Every section is optional; an empty file yields the defaults.

JSON example:
    {
      "log_level": "DEBUG",
      "filters": {
        "strict_unknown_keys": true,
        "range_bounds": {"low": {"min": 0, "max": 50}}
      },
      "events": {"recorder_path": "/var/log/farm2go/events.jsonl"}
    }
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from farm2go.core.events.event_bus import EventBus
from farm2go.core.events.sinks.file_recorder import FileRecorderSink
from farm2go.core.events.sinks.prometheus_sink import PrometheusEventSink
from farm2go.core.events.sinks.sink_logging import LoggingEventSink
from farm2go.core.filters.filter_pipeline import (
    DEFAULT_RANGE_BOUNDS,
    FilterConfig,
    RangeBounds,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class RangeBoundsConfig(BaseModel):
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_order(self) -> RangeBoundsConfig:
        """Reject inverted ranges."""
        if self.min > self.max:
            raise ValueError(f"range min {self.min} exceeds max {self.max}")
        return self


class FilterSettings(BaseModel):
    """Filter pipeline settings shared by every screen."""

    strict_unknown_keys: bool = False

    # Overrides/extends the fixed range lookup (range id -> bounds).
    range_bounds: dict[str, RangeBoundsConfig] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    def resolved_range_bounds(self) -> dict[str, RangeBounds]:
        bounds = dict(DEFAULT_RANGE_BOUNDS)
        for key, cfg in self.range_bounds.items():
            bounds[key] = RangeBounds(min=cfg.min, max=cfg.max)
        return bounds

    def filter_config(
        self,
        *,
        category_key: str | None = None,
        price_key: str | None = None,
        date_key: str | None = None,
    ) -> FilterConfig:
        """Build a FilterConfig for a screen with these settings applied."""
        return FilterConfig(
            category_key=category_key,
            price_key=price_key,
            date_key=date_key,
            range_bounds=self.resolved_range_bounds(),
            strict=self.strict_unknown_keys,
        )


class EventSettings(BaseModel):
    """Which sinks receive order events."""

    log_events: bool = True
    logger_name: str = Field(default="farm2go.events", min_length=1)
    recorder_path: str | None = None
    prometheus_enabled: bool = False

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    log_level: LogLevel = "INFO"
    filters: FilterSettings = Field(default_factory=FilterSettings)
    events: EventSettings = Field(default_factory=EventSettings)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> AppConfig:
        """Create an AppConfig instance from a JSON-compatible object."""
        return cls.model_validate(obj)

    @classmethod
    def load(cls, path: str | Path) -> AppConfig:
        """Load configuration from a ``.json`` or ``.toml`` file."""
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(config_path)

        if config_path.suffix == ".toml":
            with config_path.open("rb") as fh:
                data = tomllib.load(fh)
        else:
            data = json.loads(config_path.read_text(encoding="utf-8"))

        return cls.from_json_obj(data)


def build_event_bus(settings: EventSettings) -> EventBus:
    """Assemble the event bus and its sinks from settings."""
    bus = EventBus()

    if settings.log_events:
        bus.register(LoggingEventSink(logging.getLogger(settings.logger_name)))
    if settings.recorder_path:
        bus.register(FileRecorderSink(settings.recorder_path))
    if settings.prometheus_enabled:
        bus.register(PrometheusEventSink())

    return bus
