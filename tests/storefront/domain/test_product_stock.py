"""Tests for the Product aggregate's stock ledger."""

import pytest
from protean.exceptions import ValidationError
from storefront.exceptions import OutOfStock, ProductUnavailable
from storefront.product.events import StockDecremented, StockRestocked, StockShortfallDetected
from storefront.product.product import Product


def _product(stock=5):
    product = Product.add(name="Kashmiri Chilli", sku="SPICE-001", price=180.0, stock=stock, weight="200g")
    product._events.clear()
    return product


class TestSellability:
    def test_sellable_within_stock(self):
        _product(stock=5).assert_can_sell(5)

    def test_out_of_stock(self):
        with pytest.raises(OutOfStock) as exc:
            _product(stock=1).assert_can_sell(2)
        assert "Insufficient stock for Kashmiri Chilli. Available: 1" in exc.value.messages["quantity"]

    def test_inactive_product(self):
        product = _product()
        product.deactivate()
        with pytest.raises(ProductUnavailable) as exc:
            product.assert_can_sell(1)
        assert "Product Kashmiri Chilli is not available" in exc.value.messages["product"]


class TestLedger:
    def test_decrement(self):
        product = _product(stock=5)
        product.decrement_stock(2, order_id="order-001")
        assert product.stock == 3
        event = next(e for e in product._events if isinstance(e, StockDecremented))
        assert (event.previous_stock, event.new_stock) == (5, 3)

    def test_decrement_clamps_at_zero_and_reports_shortfall(self):
        product = _product(stock=1)
        product.decrement_stock(3, order_id="order-001")
        assert product.stock == 0
        shortfall = next(e for e in product._events if isinstance(e, StockShortfallDetected))
        assert shortfall.shortfall == 2
        assert shortfall.available == 1

    def test_exact_decrement_has_no_shortfall(self):
        product = _product(stock=2)
        product.decrement_stock(2, order_id="order-001")
        assert product.stock == 0
        assert not any(isinstance(e, StockShortfallDetected) for e in product._events)

    def test_restock(self):
        product = _product(stock=0)
        product.restock(10)
        assert product.stock == 10
        assert any(isinstance(e, StockRestocked) for e in product._events)

    def test_restock_requires_positive_quantity(self):
        with pytest.raises(ValidationError):
            _product().restock(0)

    def test_stock_cannot_be_negative(self):
        with pytest.raises(ValidationError):
            Product(name="Broken", sku="BROKEN-1", price=1.0, stock=-1)
