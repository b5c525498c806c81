"""Error taxonomy for the order core.

InvalidTransition is recovered by the presentation layer (it should not
have offered the action). StorageError is surfaced to the end user as a
generic failure. NotificationError is always recovered and logged.
"""

from __future__ import annotations

from typing import Iterable


class Farm2GoError(Exception):
    """Base class for all errors raised by farm2go."""


class InvalidTransition(Farm2GoError):
    """Requested order status edge is not in the transition table."""

    def __init__(self, order_id: str, from_status: str, to_status: str) -> None:
        self.order_id = order_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid status transition for order {order_id}: "
            f"{from_status} -> {to_status}"
        )


class StorageError(Farm2GoError):
    """Raised by the persistence collaborator."""

    def __init__(self, message: str, *, order_id: str | None = None) -> None:
        self.order_id = order_id
        super().__init__(message)


class NotificationError(Farm2GoError):
    """Raised by the notification collaborator."""

    def __init__(self, message: str, *, order_id: str | None = None) -> None:
        self.order_id = order_id
        super().__init__(message)


class UnknownFilterKeyError(Farm2GoError):
    """Strict-mode filter pipeline saw keys it cannot interpret."""

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys = tuple(sorted(keys))
        super().__init__(f"Unknown filter keys: {', '.join(self.keys)}")
