"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across
users. State tracks IDs returned by creation endpoints so follow-up requests
can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CheckoutState:
    """Tracks one customer's path from cart to paid order."""

    headers: dict = field(default_factory=dict)
    product_id: str | None = None
    address_id: str | None = None
    order_id: str | None = None
    gateway_order_id: str | None = None
    payment_id: str | None = None
    current_status: str = "Pending"


@dataclass
class RefundState(CheckoutState):
    """Checkout state plus the refund raised against the order."""

    refund_id: str | None = None
    refund_status: str | None = None


@dataclass
class StockState:
    """Tracks a contended product for the oversell scenario."""

    product_id: str | None = None
    initial_stock: int = 0
    order_ids: list[str] = field(default_factory=list)
