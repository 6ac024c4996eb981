"""Domain events for the Product aggregate (stock ledger movements)."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    sku = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockRestocked:
    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    restocked_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockDecremented:
    """Stock left the ledger because an order was paid."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    decremented_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockShortfallDetected:
    """A paid order asked for more units than the ledger held.

    The ledger was clamped at zero; operators must source ``shortfall`` units.
    """

    __version__ = 1

    product_id = Identifier(required=True)
    product_name = String(required=True)
    order_id = Identifier(required=True)
    requested = Integer(required=True)
    available = Integer(required=True)
    shortfall = Integer(required=True)
    detected_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDeactivated:
    __version__ = 1

    product_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)
