"""Payment gateway factory.

``get_gateway()`` returns the process-wide adapter: ``FakeGateway`` unless
``PAYMENT_GATEWAY=razorpay``. ``set_gateway()``/``reset_gateway()`` let tests
swap it.
"""

from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import PaymentGateway
from storefront.gateway.razorpay_adapter import RazorpayGateway
from storefront.settings import get_settings

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway."""
    global _current_gateway
    if _current_gateway is None:
        settings = get_settings()
        if settings.gateway == "razorpay":
            _current_gateway = RazorpayGateway.from_settings(settings)
        else:
            _current_gateway = FakeGateway(key_id=settings.razorpay_key_id)
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
