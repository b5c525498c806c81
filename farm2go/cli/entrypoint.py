"""Batch command line interface.

Examples:
    farm2go filter --records orders.json --filters '{"dateRange": "week", "sortBy": "newest"}' \\
        --date-key created_at --price-key total_price
    farm2go next-states --status confirmed
    farm2go transition --order order.json --to processing --actor farmer-1
    farm2go sections --kind marketplace --records products.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from farm2go.adapters.in_memory import InMemoryNotifier, InMemoryOrderStore
from farm2go.config.app_config import AppConfig, build_event_bus
from farm2go.core.domain.errors import Farm2GoError
from farm2go.core.domain.order_state_machine import available_actions, is_terminal_state
from farm2go.core.domain.types import ORDER_STATUSES, Order
from farm2go.core.filters.filter_pipeline import apply_filters
from farm2go.core.filters.filter_sections import SECTION_BUILDERS
from farm2go.services.order_status_service import OrderStatusService

LOGGER = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(path)
    return json.loads(path.read_text(encoding="utf-8"))


def _load_config(path: Path | None) -> AppConfig:
    if path is None:
        return AppConfig()
    return AppConfig.load(path)


def _configure_logging(cfg: AppConfig) -> None:
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str, ensure_ascii=False))


def _load_records(path: Path) -> list[Any]:
    records = _load_json(path)
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON array")
    return records


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_filter(args: argparse.Namespace, cfg: AppConfig) -> int:
    records = _load_records(args.records)

    filter_state = json.loads(args.filters)
    if not isinstance(filter_state, dict):
        raise ValueError("--filters must be a JSON object")

    filter_cfg = cfg.filters.filter_config(
        category_key=args.category_key,
        price_key=args.price_key,
        date_key=args.date_key,
    )

    result = apply_filters(
        records,
        filter_state,
        filter_cfg,
        strict=True if args.strict else None,
    )

    LOGGER.info(
        "Filtered records",
        extra={"input_count": len(records), "output_count": len(result)},
    )
    _print_json(result)
    return 0


def _cmd_next_states(args: argparse.Namespace, cfg: AppConfig) -> int:
    _print_json(
        {
            "status": args.status,
            "terminal": is_terminal_state(args.status),
            "next_states": list(available_actions(args.status)),
        }
    )
    return 0


def _cmd_transition(args: argparse.Namespace, cfg: AppConfig) -> int:
    order = Order.model_validate(_load_json(args.order))

    store = InMemoryOrderStore([order])
    notifier = InMemoryNotifier()
    event_bus = build_event_bus(cfg.events)

    try:
        service = OrderStatusService(store=store, notifier=notifier, event_bus=event_bus)
        updated = service.update_status(
            order,
            args.to,
            actor_id=args.actor,
            buyer_name=args.buyer_name,
            farmer_name=args.farmer_name,
            reason=args.reason,
        )
    finally:
        event_bus.close()

    _print_json(
        {
            "order": updated.model_dump(mode="json"),
            "notifications": [n.model_dump(mode="json") for n in notifier.notifications],
        }
    )
    return 0


def _cmd_sections(args: argparse.Namespace, cfg: AppConfig) -> int:
    records = _load_records(args.records)
    sections = SECTION_BUILDERS[args.kind](records)
    _print_json([section.model_dump(mode="json", exclude_none=True) for section in sections])
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="farm2go",
        description="Farm2Go order core: filter records and drive order status changes",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a JSON or TOML configuration file.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_filter = sub.add_parser("filter", help="Filter and sort a JSON array of records.")
    p_filter.add_argument("--records", type=Path, required=True, help="JSON array of records.")
    p_filter.add_argument(
        "--filters",
        default="{}",
        help='FilterState as a JSON object, e.g. \'{"category": "fruits"}\'.',
    )
    p_filter.add_argument("--category-key", default=None, help="Field holding the category.")
    p_filter.add_argument("--price-key", default=None, help="Field holding the price/amount.")
    p_filter.add_argument("--date-key", default=None, help="Field holding the record date.")
    p_filter.add_argument(
        "--strict",
        action="store_true",
        help="Fail on filter keys that are neither recognized nor custom.",
    )
    p_filter.set_defaults(handler=_cmd_filter)

    p_next = sub.add_parser("next-states", help="List the statuses reachable from a status.")
    p_next.add_argument("--status", required=True, choices=ORDER_STATUSES)
    p_next.set_defaults(handler=_cmd_next_states)

    p_transition = sub.add_parser("transition", help="Apply a status change to an order.")
    p_transition.add_argument("--order", type=Path, required=True, help="Order JSON file.")
    p_transition.add_argument("--to", required=True, choices=ORDER_STATUSES, help="Target status.")
    p_transition.add_argument("--actor", required=True, help="Id of the user making the change.")
    p_transition.add_argument("--buyer-name", default=None)
    p_transition.add_argument("--farmer-name", default=None)
    p_transition.add_argument("--reason", default=None, help="Cancellation reason.")
    p_transition.set_defaults(handler=_cmd_transition)

    p_sections = sub.add_parser("sections", help="Print the filter sections for a screen.")
    p_sections.add_argument("--kind", required=True, choices=sorted(SECTION_BUILDERS))
    p_sections.add_argument("--records", type=Path, required=True, help="JSON array of records.")
    p_sections.set_defaults(handler=_cmd_sections)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = _load_config(args.config)
    except (FileNotFoundError, ValueError, ValidationError) as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return 2

    _configure_logging(cfg)

    try:
        return args.handler(args, cfg)
    except Farm2GoError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
