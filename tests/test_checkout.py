"""Tests for the checkout service"""

import pytest

from cart_simulator.core.result import FailureReason
from cart_simulator.models.checkout import OrderStatus
from cart_simulator.models.coupon import Coupon, CouponType
from cart_simulator.models.product import Product


def test_checkout_end_to_end(stocked_context):
    context = stocked_context
    cart = context.carts.create_cart("u-1")
    assert context.carts.add_product_to_cart(cart.id, "p-100", 3)

    result = context.checkout.checkout(cart.id)

    assert result
    order = result.value
    assert order.status == OrderStatus.CONFIRMED
    assert order.order_id
    assert order.cart_id == cart.id
    assert order.user_id == "u-1"
    assert context.products.get_product("p-100").stock == 7
    assert cart.is_empty
    assert context.orders.get_order(order.order_id) == order


def test_order_snapshots_items_and_totals(stocked_context):
    context = stocked_context
    cart = context.carts.create_cart()
    context.carts.add_product_to_cart(cart.id, "p-100", 2)
    context.carts.add_product_to_cart(cart.id, "p-050", 1)
    assert context.carts.apply_coupon_to_cart(cart.id, "TEN")
    context.carts.set_shipping_cost(cart.id, 10)

    order = context.checkout.checkout(cart.id).value

    assert len(order.items) == 2
    chair = next(i for i in order.items if i.product_id == "p-100")
    assert chair.quantity == 2
    assert chair.final_unit_price == pytest.approx(90.0)
    assert chair.subtotal == pytest.approx(180.0)
    assert chair.product["stock"] == 8

    assert order.summary.subtotal == pytest.approx(230.0)
    assert order.summary.coupon_discounts == pytest.approx(23.0)
    assert order.summary.total == pytest.approx(217.0)
    assert [c.code for c in order.applied_coupons] == ["TEN"]
    assert order.applied_coupons[0].discount == pytest.approx(23.0)

    # Later catalog changes do not touch the order
    context.products.update_product("p-100", price=500.0)
    assert chair.unit_price == pytest.approx(100.0)


def test_checkout_keeps_shipping_cost_and_coupon_usage(stocked_context):
    context = stocked_context
    cart = context.carts.create_cart()
    context.carts.add_product_to_cart(cart.id, "p-100", 1)
    context.carts.apply_coupon_to_cart(cart.id, "TWENTY")
    context.carts.set_shipping_cost(cart.id, 12)

    assert context.checkout.checkout(cart.id)

    assert cart.shipping_cost == 12
    assert context.coupons.get_coupon("TWENTY").usage_count == 1


def test_checkout_unknown_cart(context):
    result = context.checkout.checkout("missing")

    assert not result
    assert result.reason == FailureReason.CART_NOT_FOUND
    assert result.is_not_found


def test_checkout_empty_cart(context):
    cart = context.carts.create_cart()

    result = context.checkout.checkout(cart.id)

    assert result.reason == FailureReason.VALIDATION_FAILED
    assert result.errors == ["Cart is empty"]


def test_checkout_with_stock_shortfall_changes_nothing(stocked_context):
    context = stocked_context
    cart = context.carts.create_cart()
    context.carts.add_product_to_cart(cart.id, "p-100", 3)
    context.products.update_product("p-100", stock=2)

    result = context.checkout.checkout(cart.id)

    assert result.reason == FailureReason.VALIDATION_FAILED
    assert context.products.get_product("p-100").stock == 2
    assert not cart.is_empty
    assert context.orders.list_orders() == []


def test_checkout_stock_commit_is_not_rolled_back(stocked_context):
    context = stocked_context
    cart = context.carts.create_cart()
    context.carts.add_product_to_cart(cart.id, "p-100", 2)
    context.carts.add_product_to_cart(cart.id, "p-050", 1)

    # The cart still holds the product, but the catalog no longer knows it
    context.products.remove_product("p-050")

    result = context.checkout.checkout(cart.id)

    assert not result
    assert result.reason == FailureReason.STOCK_COMMIT_FAILED
    assert context.products.get_product("p-100").stock == 8
    assert len(cart.items) == 2
    assert context.orders.list_orders() == []


def test_list_orders(stocked_context):
    context = stocked_context
    order_ids = []
    for _ in range(2):
        cart = context.carts.create_cart("u-2")
        context.carts.add_product_to_cart(cart.id, "p-050", 1)
        order_ids.append(context.checkout.checkout(cart.id).value.order_id)

    listed = context.orders.list_orders()

    assert {o.order_id for o in listed} == set(order_ids)
    assert listed[0].processed_at >= listed[1].processed_at
    assert len(context.orders.list_orders(limit=1)) == 1
    assert len(context.orders.get_orders_by_user("u-2")) == 2


def test_orders_survive_reload(stocked_context):
    from cart_simulator.core.context import build_context

    context = stocked_context
    cart = context.carts.create_cart()
    context.carts.add_product_to_cart(cart.id, "p-050", 2)
    order = context.checkout.checkout(cart.id).value

    reloaded = build_context(context.settings)

    assert reloaded.orders.get_order(order.order_id) == order
    assert reloaded.products.get_product("p-050").stock == 3
    assert reloaded.carts.get_cart(cart.id).is_empty


def test_checkout_after_discount_change_uses_live_price(stocked_context):
    context = stocked_context
    cart = context.carts.create_cart()
    context.carts.add_product_to_cart(cart.id, "p-050", 1)
    context.products.update_product("p-050", discount=50)

    order = context.checkout.checkout(cart.id).value

    assert order.summary.subtotal == pytest.approx(25.0)


def test_new_product_can_be_checked_out(context):
    assert context.products.add_product(Product(id="p-new", name="Kettle", price=40.0, category="Home", stock=1))
    cart = context.carts.create_cart()
    context.carts.add_product_to_cart(cart.id, "p-new", 1)

    assert context.checkout.checkout(cart.id)
    assert context.products.get_product("p-new").stock == 0


def test_last_use_of_limited_coupon_can_be_redeemed(stocked_context):
    context = stocked_context
    assert context.coupons.add_coupon(Coupon(code="ONCE", type=CouponType.FIXED, value=10, usage_limit=1))
    cart = context.carts.create_cart()
    context.carts.add_product_to_cart(cart.id, "p-050", 1)

    assert context.carts.apply_coupon_to_cart(cart.id, "ONCE")
    assert cart.coupon_discounts == pytest.approx(10.0)
    assert cart.validate() == []

    result = context.checkout.checkout(cart.id)

    assert result
    assert result.value.summary.coupon_discounts == pytest.approx(10.0)
    assert result.value.applied_coupons[0].discount == pytest.approx(10.0)
    assert context.coupons.get_coupon("ONCE").is_exhausted()


def test_exhausted_coupon_is_refused_to_the_next_cart(stocked_context):
    context = stocked_context
    context.coupons.add_coupon(Coupon(code="ONCE", type=CouponType.FIXED, value=10, usage_limit=1))
    first = context.carts.create_cart("u-1")
    second = context.carts.create_cart("u-2")
    for cart in (first, second):
        context.carts.add_product_to_cart(cart.id, "p-050", 1)

    assert context.carts.apply_coupon_to_cart(first.id, "ONCE")
    result = context.carts.apply_coupon_to_cart(second.id, "ONCE")

    assert result.reason == FailureReason.COUPON_INVALID
    assert not second.has_coupon("ONCE")
