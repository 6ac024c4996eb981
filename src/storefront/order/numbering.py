"""Human-readable order numbers, e.g. ``ORD-M1A2B3C4-7QX9Z``."""

import secrets
import string
import time

from protean.utils.globals import current_domain

from storefront.exceptions import ConflictError
from storefront.order.order import Order
from storefront.settings import get_settings

_BASE36 = string.digits + string.ascii_uppercase
MAX_ATTEMPTS = 5


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_order_number(prefix: str | None = None) -> str:
    prefix = prefix or get_settings().order_number_prefix
    stamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"{prefix}-{stamp}-{suffix}"


def next_order_number() -> str:
    """Generate an order number not used by any existing order."""
    repo = current_domain.repository_for(Order)
    for _ in range(MAX_ATTEMPTS):
        candidate = generate_order_number()
        if repo.find_by_number(candidate) is None:
            return candidate
    raise ConflictError({"order_number": ["Could not allocate a unique order number"]})
