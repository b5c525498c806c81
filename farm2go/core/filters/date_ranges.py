"""Start boundaries for the date range filter options."""

from __future__ import annotations

from datetime import datetime, timedelta


def date_range_start(range_id: str, now: datetime) -> datetime | None:
    """Return the inclusive lower bound for ``range_id`` relative to ``now``.

    ``all`` and unknown ids impose no bound and return None.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if range_id == "today":
        return midnight
    if range_id == "week":
        return now - timedelta(days=7)
    if range_id == "month":
        return midnight.replace(day=1)
    if range_id == "quarter":
        quarter_start_month = ((now.month - 1) // 3) * 3 + 1
        return midnight.replace(month=quarter_start_month, day=1)
    if range_id == "year":
        return midnight.replace(month=1, day=1)
    return None
