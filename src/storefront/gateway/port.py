"""Payment gateway port (abstract interface).

The storefront talks to exactly one gateway. Adapters take and return
integer minor units; converting from currency amounts is the caller's job.
Signature verification does not go through the port: the HMAC scheme is
shared by every adapter and lives in ``storefront.shared.signatures``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class GatewayOrder:
    """A gateway-side order the customer pays against at checkout."""

    gateway_order_id: str
    amount_minor: int
    currency: str
    receipt: str
    status: str = "created"


@dataclass(frozen=True)
class RefundResult:
    """Result of a refund attempt."""

    success: bool
    gateway_refund_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class GatewayCall:
    method: str
    payload: dict = field(default_factory=dict)


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    key_id: str

    @abstractmethod
    def create_order(self, amount_minor: int, currency: str, receipt: str, notes: dict) -> GatewayOrder:
        """Register an order with the gateway. Raises ``GatewayError`` on failure."""
        ...

    @abstractmethod
    def create_refund(self, gateway_payment_id: str, amount_minor: int, notes: dict) -> RefundResult:
        """Refund a captured payment."""
        ...
