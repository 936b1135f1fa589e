"""Tests for cart line items"""

import pytest

from cart_simulator.core.result import FailureReason
from cart_simulator.models.cart import CartItem


def test_item_totals(product):
    item = CartItem(product=product, quantity=2)

    assert item.subtotal == pytest.approx(180.0)
    assert item.original_subtotal == pytest.approx(200.0)
    assert item.total_discount == pytest.approx(20.0)


def test_item_shares_the_product_instance(product):
    item = CartItem(product=product, quantity=1)
    product.discount = 50

    assert item.product is product
    assert item.subtotal == pytest.approx(50.0)


def test_update_quantity_zero_is_rejected(product):
    item = CartItem(product=product, quantity=2)

    result = item.update_quantity(0)

    assert not result
    assert result.reason == FailureReason.INVALID_QUANTITY
    assert item.quantity == 2


def test_update_quantity_above_stock_is_rejected(product):
    item = CartItem(product=product, quantity=2)

    result = item.update_quantity(product.stock + 1)

    assert not result
    assert result.reason == FailureReason.INSUFFICIENT_STOCK
    assert item.quantity == 2


def test_increase_and_decrease(product):
    item = CartItem(product=product, quantity=2)

    assert item.increase_quantity(3)
    assert item.quantity == 5
    assert item.decrease_quantity()
    assert item.quantity == 4
    assert not item.decrease_quantity(4)
    assert item.quantity == 4


def test_combine_with_same_product(product):
    item = CartItem(product=product, quantity=2)
    other = CartItem(product=product, quantity=3)

    assert item.combine_with(other)
    assert item.quantity == 5


def test_combine_with_other_product_fails(product, plain_product):
    item = CartItem(product=product, quantity=2)
    other = CartItem(product=plain_product, quantity=1)

    result = item.combine_with(other)

    assert not result
    assert result.reason == FailureReason.PRODUCT_MISMATCH
    assert item.quantity == 2


def test_combine_beyond_stock_changes_nothing(plain_product):
    item = CartItem(product=plain_product, quantity=3)
    other = CartItem(product=plain_product, quantity=3)

    result = item.combine_with(other)

    assert not result
    assert result.reason == FailureReason.INSUFFICIENT_STOCK
    assert item.quantity == 3


def test_validate_flags_stock_shortfall(product):
    item = CartItem(product=product, quantity=3)
    product.stock = 1

    errors = item.validate()

    assert errors == ["Requested quantity (3) not available in stock (1)"]
