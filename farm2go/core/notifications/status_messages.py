"""Human-readable status change messages.

Buyer and farmer see different wording for the same change. Names default
to "the farmer" / "the buyer" when the caller does not know them.
"""

from __future__ import annotations

from dataclasses import dataclass

CURRENCY_SYMBOL: str = "₱"


@dataclass(frozen=True, slots=True)
class StatusMessages:
    buyer_title: str
    buyer_message: str
    farmer_title: str
    farmer_message: str


def format_amount(amount: float) -> str:
    """Render an amount as ``₱1,234.50``."""
    return f"{CURRENCY_SYMBOL}{amount:,.2f}"


def messages_for(
    new_status: str,
    *,
    buyer_name: str | None = None,
    farmer_name: str | None = None,
    reason: str | None = None,
) -> StatusMessages | None:
    """Return buyer/farmer wording for ``new_status``, None if nothing is sent."""
    farmer = farmer_name or "the farmer"
    buyer = buyer_name or "the buyer"

    if new_status == "confirmed":
        return StatusMessages(
            buyer_title="Order Confirmed",
            buyer_message=f"Your order has been confirmed by {farmer} and is being prepared.",
            farmer_title="Order Confirmed",
            farmer_message=f"You confirmed the order from {buyer}.",
        )
    if new_status == "processing":
        return StatusMessages(
            buyer_title="Order Being Prepared",
            buyer_message=f"Your order is being prepared by {farmer}.",
            farmer_title="Order In Progress",
            farmer_message=f"Order from {buyer} is now being processed.",
        )
    if new_status == "ready":
        return StatusMessages(
            buyer_title="Order Ready for Pickup",
            buyer_message=f"Your order is ready for pickup! Please collect it from {farmer}.",
            farmer_title="Order Ready",
            farmer_message=f"Order for {buyer} is ready for pickup.",
        )
    if new_status == "delivered":
        return StatusMessages(
            buyer_title="Order Delivered",
            buyer_message="Your order has been delivered. Thank you for supporting local farmers!",
            farmer_title="Order Delivered",
            farmer_message=f"Order from {buyer} has been delivered.",
        )
    if new_status == "cancelled":
        suffix = f" Reason: {reason}" if reason else ""
        return StatusMessages(
            buyer_title="Order Cancelled",
            buyer_message=(
                "Your order has been cancelled. If you have any questions, "
                f"please contact {farmer}.{suffix}"
            ),
            farmer_title="Order Cancelled",
            farmer_message=f"Order from {buyer} has been cancelled.{suffix}",
        )
    return None


def build_summary(
    *,
    order_id: str,
    actor_id: str,
    previous_status: str,
    new_status: str,
    item_count: int,
    total_amount: float,
    buyer_name: str | None = None,
    farmer_name: str | None = None,
) -> str:
    """One-line description of a status change for logs and notification payloads."""
    summary = (
        f"Order {order_id} {previous_status} -> {new_status} by {actor_id}: "
        f"{item_count} item(s) worth {format_amount(total_amount)}"
    )
    parties = []
    if buyer_name:
        parties.append(f"buyer: {buyer_name}")
    if farmer_name:
        parties.append(f"farmer: {farmer_name}")
    if parties:
        summary += f" ({', '.join(parties)})"
    return summary
