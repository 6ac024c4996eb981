"""Money helpers.

Amounts are decimal currency values (rupees) everywhere inside the storefront
and on the HTTP wire. The payment gateway speaks integer minor units (paise);
conversion happens only at the Payment Intent boundary.
"""

from decimal import ROUND_HALF_UP, Decimal

MINOR_UNITS_PER_MAJOR = 100

_CENT = Decimal("0.01")
_UNIT = Decimal("1")


def to_decimal(amount) -> Decimal:
    # str() first so binary float noise (0.1 + 0.2) does not leak in
    return Decimal(str(amount))


def round_money(amount) -> float:
    """Round a currency amount to two places, half up."""
    return float(to_decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP))


def to_minor_units(amount) -> int:
    """Convert a decimal currency amount to integer minor units."""
    return int((to_decimal(amount) * MINOR_UNITS_PER_MAJOR).quantize(_UNIT, rounding=ROUND_HALF_UP))


def from_minor_units(amount_minor: int) -> float:
    return float(Decimal(amount_minor) / MINOR_UNITS_PER_MAJOR)


def format_inr(amount) -> str:
    return f"₹{to_decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP):,}"
