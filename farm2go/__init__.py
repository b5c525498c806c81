"""Public API for the farm2go package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Collaborators and service
# ----------------------------------------------------------------------
from farm2go.adapters.in_memory import InMemoryNotifier, InMemoryOrderStore

# ----------------------------------------------------------------------
# Config API
# ----------------------------------------------------------------------
from farm2go.config.app_config import AppConfig, build_event_bus

# ----------------------------------------------------------------------
# Order status machine
# ----------------------------------------------------------------------
from farm2go.core.domain.errors import (
    Farm2GoError,
    InvalidTransition,
    NotificationError,
    StorageError,
    UnknownFilterKeyError,
)
from farm2go.core.domain.order_state_machine import (
    allowed_next_states,
    available_actions,
    is_terminal_state,
    is_valid_transition,
    request_transition,
)
from farm2go.core.domain.purchase_code import (
    build_qr_payload,
    generate_purchase_code,
    is_valid_purchase_code,
)

# ----------------------------------------------------------------------
# Domain types
# ----------------------------------------------------------------------
from farm2go.core.domain.types import (
    FilterState,
    Notification,
    Order,
    OrderStatus,
    Product,
    StatusChangeContext,
)
from farm2go.core.events.event_bus import EventBus

# ----------------------------------------------------------------------
# Filter/sort pipeline
# ----------------------------------------------------------------------
from farm2go.core.filters.filter_pipeline import (
    FilterConfig,
    FilterPredicate,
    RangeBounds,
    apply_filters,
    sort_records,
)
from farm2go.core.ports.notifier import StatusNotifier
from farm2go.core.ports.order_store import OrderStore
from farm2go.services.order_status_service import OrderStatusService

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Status machine
    "request_transition",
    "allowed_next_states",
    "available_actions",
    "is_terminal_state",
    "is_valid_transition",

    # Purchase codes
    "generate_purchase_code",
    "is_valid_purchase_code",
    "build_qr_payload",

    # Filter pipeline
    "apply_filters",
    "sort_records",
    "FilterConfig",
    "FilterPredicate",
    "RangeBounds",

    # Domain types
    "Order",
    "OrderStatus",
    "Product",
    "FilterState",
    "StatusChangeContext",
    "Notification",

    # Errors
    "Farm2GoError",
    "InvalidTransition",
    "StorageError",
    "NotificationError",
    "UnknownFilterKeyError",

    # Collaborators
    "OrderStore",
    "StatusNotifier",
    "OrderStatusService",
    "InMemoryOrderStore",
    "InMemoryNotifier",
    "EventBus",

    # Config
    "AppConfig",
    "build_event_bus",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("farm2go-core")
except PackageNotFoundError:
    __version__ = "0.0.0"
