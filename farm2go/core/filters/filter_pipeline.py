"""Generic filter/sort pipeline for homogeneous record lists.

The pipeline narrows orders, sales or products by category, numeric range,
date range and custom predicates, then orders the result by the selected
sort key. It knows nothing about the records beyond the field names it is
configured with, and it never mutates its inputs.

Malformed input degrades to "filter not applied". Unknown filter keys are
ignored unless strict mode is enabled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping

from farm2go.core.domain.errors import UnknownFilterKeyError
from farm2go.core.filters.date_ranges import date_range_start
from farm2go.core.filters.fields import as_datetime, as_number, read_field

if TYPE_CHECKING:
    from farm2go.core.domain.types import FilterState

LOGGER = logging.getLogger(__name__)

# (record, selected value) -> keep?
FilterPredicate = Callable[[Any, Any], bool]

SORT_KEY: str = "sortBy"
CATEGORY_KEY: str = "category"
RANGE_FILTER_KEYS: frozenset[str] = frozenset({"priceRange", "amountRange", "revenueRange"})
DATE_FILTER_KEYS: frozenset[str] = frozenset({"dateRange", "period"})

RECOGNIZED_KEYS: frozenset[str] = (
    frozenset({CATEGORY_KEY, SORT_KEY}) | RANGE_FILTER_KEYS | DATE_FILTER_KEYS
)

DEFAULT_DATE_SORT_FIELD: str = "created_at"
NAME_SORT_FIELD: str = "name"
# Fallback numeric fields for "<field>-low" / "<field>-high" sort keys.
NUMERIC_SORT_FIELDS: tuple[str, ...] = ("price", "total_price", "amount", "revenue")

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class RangeBounds:
    """Inclusive numeric bounds of a range filter option."""

    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


DEFAULT_RANGE_BOUNDS: Mapping[str, RangeBounds] = MappingProxyType(
    {
        "low": RangeBounds(min=0, max=500),
        "medium": RangeBounds(min=500, max=1500),
        "high": RangeBounds(min=1500, max=3000),
        "premium": RangeBounds(min=3000, max=10000),
    }
)


@dataclass(frozen=True, slots=True)
class FilterConfig:
    """Which record fields carry category / price / date semantics.

    Any accessor left as None disables the matching filter.
    """

    category_key: str | None = None
    price_key: str | None = None
    date_key: str | None = None
    custom_filters: Mapping[str, FilterPredicate] = field(default_factory=dict)
    range_bounds: Mapping[str, RangeBounds] = field(
        default_factory=lambda: DEFAULT_RANGE_BOUNDS
    )
    strict: bool = False


def resolve_range_bounds(
    range_id: Any,
    bounds: Mapping[str, RangeBounds] = DEFAULT_RANGE_BOUNDS,
) -> RangeBounds | None:
    """Return the bounds registered for ``range_id``, None when unknown."""
    if not isinstance(range_id, str):
        return None
    return bounds.get(range_id)


def _is_inactive(value: Any) -> bool:
    return not value or value == "all"


def _filter_category(records: list[Any], key: str, value: Any) -> list[Any]:
    wanted = str(value).casefold()
    kept = []
    for record in records:
        field_value = read_field(record, key)
        if field_value is not None and str(field_value).casefold() == wanted:
            kept.append(record)
    return kept


def _filter_range(records: list[Any], key: str, bounds: RangeBounds) -> list[Any]:
    kept = []
    for record in records:
        number = as_number(read_field(record, key))
        if number is not None and bounds.contains(number):
            kept.append(record)
    return kept


def _filter_since(records: list[Any], key: str, start: datetime) -> list[Any]:
    kept = []
    for record in records:
        when = as_datetime(read_field(record, key), start.tzinfo)
        if when is not None and when >= start:
            kept.append(record)
    return kept


def apply_filters(
    records: Iterable[Any],
    filter_state: FilterState | None,
    config: FilterConfig | None = None,
    *,
    now: datetime | None = None,
    strict: bool | None = None,
) -> list[Any]:
    """Return the records matching every active filter, sorted by ``sortBy``.

    Args:
        records: homogeneous records (mappings or objects).
        filter_state: filter-section key -> selected value. Values that are
            falsy or ``"all"`` are inactive.
        config: field accessors and custom predicates.
        now: reference time for date ranges. Defaults to the local time;
            a naive value is read as local time.
        strict: override ``config.strict``. In strict mode keys that are
            neither recognized nor custom raise UnknownFilterKeyError.
    """
    cfg = config if config is not None else FilterConfig()
    state: Mapping[str, Any] = filter_state if filter_state is not None else {}
    strict_mode = cfg.strict if strict is None else strict
    reference = now if now is not None else datetime.now().astimezone()
    if reference.tzinfo is None:
        # Naive reference times are local; record timestamps may be aware.
        reference = reference.astimezone()

    unknown = [
        key for key in state
        if key not in RECOGNIZED_KEYS and key not in cfg.custom_filters
    ]
    if unknown:
        if strict_mode:
            raise UnknownFilterKeyError(unknown)
        LOGGER.debug("Ignoring unknown filter keys", extra={"keys": unknown})

    filtered = list(records)

    for key, value in state.items():
        if key == SORT_KEY or _is_inactive(value):
            continue

        if key == CATEGORY_KEY:
            if cfg.category_key:
                filtered = _filter_category(filtered, cfg.category_key, value)

        elif key in RANGE_FILTER_KEYS:
            if cfg.price_key:
                bounds = resolve_range_bounds(value, cfg.range_bounds)
                if bounds is not None:
                    filtered = _filter_range(filtered, cfg.price_key, bounds)

        elif key in DATE_FILTER_KEYS:
            if cfg.date_key:
                start = date_range_start(str(value), reference)
                if start is not None:
                    filtered = _filter_since(filtered, cfg.date_key, start)

        else:
            predicate = cfg.custom_filters.get(key)
            if predicate is not None:
                filtered = [record for record in filtered if predicate(record, value)]

    sort_by = state.get(SORT_KEY)
    if sort_by:
        filtered = sort_records(filtered, str(sort_by), cfg)

    return filtered


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------


def _date_sort_key(date_field: str) -> Callable[[Any], datetime]:
    def key(record: Any) -> datetime:
        when = as_datetime(read_field(record, date_field), timezone.utc)
        return when if when is not None else _EARLIEST

    return key


def _name_sort_key(record: Any) -> str:
    return str(read_field(record, NAME_SORT_FIELD, "")).casefold()


def _numeric_sort_key(candidates: tuple[str, ...]) -> Callable[[Any], float]:
    def key(record: Any) -> float:
        for candidate in candidates:
            number = as_number(read_field(record, candidate))
            if number is not None:
                return number
        return 0.0

    return key


def _numeric_candidates(prefix: str, cfg: FilterConfig) -> tuple[str, ...]:
    ordered: list[str] = [prefix]
    if cfg.price_key:
        ordered.append(cfg.price_key)
    ordered.extend(NUMERIC_SORT_FIELDS)
    # de-duplicate, keep first occurrence
    return tuple(dict.fromkeys(ordered))


def sort_records(
    records: Iterable[Any],
    sort_by: str,
    config: FilterConfig | None = None,
) -> list[Any]:
    """Return ``records`` ordered by the rule implied by ``sort_by``.

    Supported keys: ``newest``, ``oldest``, ``name`` and any
    ``<field>-low`` / ``<field>-high``. Other keys keep the input order.
    Sorting is stable in both directions.
    """
    cfg = config if config is not None else FilterConfig()
    items = list(records)
    date_field = cfg.date_key or DEFAULT_DATE_SORT_FIELD

    if sort_by == "newest":
        return sorted(items, key=_date_sort_key(date_field), reverse=True)
    if sort_by == "oldest":
        return sorted(items, key=_date_sort_key(date_field))
    if sort_by == "name":
        return sorted(items, key=_name_sort_key)

    prefix, _, direction = sort_by.rpartition("-")
    if prefix and direction in {"low", "high"}:
        key = _numeric_sort_key(_numeric_candidates(prefix, cfg))
        return sorted(items, key=key, reverse=direction == "high")

    LOGGER.debug("Unsupported sort key; keeping input order", extra={"sort_by": sort_by})
    return items
