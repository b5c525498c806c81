"""
Order lifecycle state machine definitions.

This module defines the canonical order states and the allowed transitions
between them. Buyer and farmer views share it to decide which actions are
offered, and the status service uses it to validate every requested change.

The state machine is pure: it returns new Order values and raises
``InvalidTransition`` for illegal edges. Persistence and notification are
the caller's business.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from farm2go.core.domain.errors import InvalidTransition
from farm2go.core.domain.types import ORDER_STATUSES

if TYPE_CHECKING:
    from farm2go.core.domain.types import Order

# Terminal order states: once reached, the order is considered complete.
ORDER_TERMINAL_STATES: frozenset[str] = frozenset(
    {
        "delivered",
        "cancelled",
    }
)


# Allowed order state transitions.
#
# Key   : current state
# Value : set of allowed next states
#
# Notes:
# - Same-state requests are not edges; request_transition treats them as no-ops.
# - Cancellation is only possible before the farmer starts processing.
ORDER_ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset(
        {
            "confirmed",
            "cancelled",
        }
    ),

    "confirmed": frozenset(
        {
            "processing",
            "cancelled",
        }
    ),

    "processing": frozenset({"ready"}),

    "ready": frozenset({"delivered"}),

    "delivered": frozenset(),

    "cancelled": frozenset(),
}

# Happy path, used to find the "advance" action for a status.
ORDER_STATUS_FLOW: tuple[str, ...] = (
    "pending",
    "confirmed",
    "processing",
    "ready",
    "delivered",
)


def is_terminal_state(state: str) -> bool:
    """Return True if the given state is terminal."""
    return state in ORDER_TERMINAL_STATES


def allowed_next_states(state: str) -> frozenset[str]:
    """Return the set of states reachable from ``state`` in one step."""
    return ORDER_ALLOWED_TRANSITIONS.get(state, frozenset())


def is_valid_transition(prev_state: str, next_state: str) -> bool:
    """Return True if the transition prev_state -> next_state is allowed."""
    return next_state in allowed_next_states(prev_state)


def available_actions(state: str) -> tuple[str, ...]:
    """Allowed next states in lifecycle order (advance first, cancel last)."""
    allowed = allowed_next_states(state)
    return tuple(s for s in ORDER_STATUSES if s in allowed)


def next_forward_status(state: str) -> str | None:
    """Return the non-cancel successor of ``state``, or None at the end of the flow."""
    if state not in ORDER_STATUS_FLOW:
        return None
    index = ORDER_STATUS_FLOW.index(state)
    if index == len(ORDER_STATUS_FLOW) - 1:
        return None
    return ORDER_STATUS_FLOW[index + 1]


def can_cancel(state: str) -> bool:
    """Return True if an order in ``state`` may still be cancelled."""
    return is_valid_transition(state, "cancelled")


def request_transition(order: Order, target_status: str) -> Order:
    """Validate ``order.status -> target_status`` and return the updated order.

    A request for the current status is an idempotent no-op and returns the
    same object, terminal states included. Any other target outside the
    allowed set raises InvalidTransition without touching the order.
    """
    current = order.status

    if target_status == current:
        return order

    if not is_valid_transition(current, target_status):
        raise InvalidTransition(order.id, current, target_status)

    return order.model_copy(update={"status": target_status})
