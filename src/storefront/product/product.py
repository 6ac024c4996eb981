"""Product aggregate (CQRS) carrying the stock ledger.

The catalogue itself (descriptions, media, search) lives elsewhere; the
storefront keeps the fields checkout needs: price, default weight variant,
whether the product is sellable, and the authoritative available quantity.

Stock is checked when an order is placed and decremented only when the
order's payment completes. ``stock`` never goes below zero.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from storefront.domain import storefront
from storefront.exceptions import OutOfStock, ProductUnavailable
from storefront.product.events import (
    ProductAdded,
    ProductDeactivated,
    StockDecremented,
    StockRestocked,
    StockShortfallDetected,
)


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    sku = String(required=True, max_length=64, unique=True)
    description = Text()
    price = Float(required=True, min_value=0.0)
    weight = String(max_length=50)
    is_active = Boolean(default=True)
    stock = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def add(cls, name, sku, price, stock=0, weight=None, description=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            sku=sku,
            price=price,
            stock=stock,
            weight=weight,
            description=description,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                sku=sku,
                price=price,
                stock=stock,
                added_at=now,
            )
        )
        return product

    def assert_can_sell(self, quantity):
        """Checkout-time check. Does not touch the ledger."""
        if not self.is_active:
            raise ProductUnavailable({"product": [f"Product {self.name} is not available"]})
        if quantity > self.stock:
            raise OutOfStock({"quantity": [f"Insufficient stock for {self.name}. Available: {self.stock}"]})

    def restock(self, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be at least 1"]})

        now = datetime.now(UTC)
        previous = self.stock
        self.stock = previous + quantity
        self.updated_at = now

        self.raise_(
            StockRestocked(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                restocked_at=now,
            )
        )

    def decrement_stock(self, quantity, order_id):
        """Take ``quantity`` units out of the ledger for a paid order.

        Stock is not re-validated here. If the ledger holds fewer units than
        the order needs, it is clamped at zero and a shortfall is reported.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Decrement quantity must be at least 1"]})

        now = datetime.now(UTC)
        previous = self.stock
        self.stock = max(previous - quantity, 0)
        self.updated_at = now

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                order_id=str(order_id),
                quantity=quantity,
                previous_stock=previous,
                new_stock=self.stock,
                decremented_at=now,
            )
        )

        if quantity > previous:
            self.raise_(
                StockShortfallDetected(
                    product_id=str(self.id),
                    product_name=self.name,
                    order_id=str(order_id),
                    requested=quantity,
                    available=previous,
                    shortfall=quantity - previous,
                    detected_at=now,
                )
            )

    def deactivate(self):
        if not self.is_active:
            return
        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(ProductDeactivated(product_id=str(self.id), deactivated_at=now))
