"""Record field access for the filter pipeline.

Records are treated opaquely: mappings (rows from the backend) and
attribute-bearing objects (pydantic models) are both supported. Dotted
keys walk nested values, e.g. ``product.category``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime, time, tzinfo
from typing import Any

_MISSING = object()


def read_field(record: Any, key: str, default: Any = None) -> Any:
    """Return the value at ``key`` (dotted path allowed) or ``default``."""
    value: Any = record
    for part in key.split("."):
        if value is None:
            return default
        if isinstance(value, Mapping):
            value = value.get(part, _MISSING)
        else:
            value = getattr(value, part, _MISSING)
        if value is _MISSING:
            return default
    return default if value is None else value


def as_number(value: Any) -> float | None:
    """Coerce a numeric-looking value to float, None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def as_datetime(value: Any, tz: tzinfo | None) -> datetime | None:
    """Coerce datetimes, dates and ISO-8601 strings to an aware datetime.

    Naive values are interpreted in ``tz``. Returns None for anything that
    cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None and tz is not None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed
