"""Order pricing: pure functions of the line items.

Totals are computed once, when the order is placed, and never recomputed.
"""

from dataclasses import dataclass

from storefront.settings import get_settings
from storefront.shared.money import round_money, to_decimal


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: float
    shipping_cost: float
    tax: float
    total: float


def calculate_subtotal(lines) -> float:
    """Sum of ``unit_price * quantity`` over ``lines`` (mappings)."""
    subtotal = sum(
        (to_decimal(line["unit_price"]) * int(line["quantity"]) for line in lines),
        start=to_decimal(0),
    )
    return round_money(subtotal)


def calculate_shipping(subtotal, threshold=None, flat_fee=None) -> float:
    """Free shipping at or above the threshold, a flat fee below it."""
    settings = get_settings()
    threshold = settings.free_shipping_threshold if threshold is None else threshold
    flat_fee = settings.flat_shipping_fee if flat_fee is None else flat_fee
    return 0.0 if subtotal >= threshold else round_money(flat_fee)


def calculate_tax(subtotal, rate=None) -> float:
    rate = get_settings().tax_rate if rate is None else rate
    return round_money(to_decimal(subtotal) * to_decimal(rate))


def price_order(lines, tax_rate=None) -> PriceBreakdown:
    subtotal = calculate_subtotal(lines)
    shipping_cost = calculate_shipping(subtotal)
    tax = calculate_tax(subtotal, tax_rate)
    total = round_money(to_decimal(subtotal) + to_decimal(shipping_cost) + to_decimal(tax))
    return PriceBreakdown(subtotal=subtotal, shipping_cost=shipping_cost, tax=tax, total=total)
