"""Shared fixtures for the cart simulator tests"""

import pytest

from cart_simulator.core.config import Settings
from cart_simulator.core.context import build_context
from cart_simulator.models.coupon import Coupon, CouponType
from cart_simulator.models.product import Product


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at an empty temporary data directory, no sample data"""
    return Settings(data_dir=str(tmp_path / "data"), seed_sample_data=False)


@pytest.fixture
def seeded_settings(tmp_path):
    return Settings(data_dir=str(tmp_path / "data"), seed_sample_data=True)


@pytest.fixture
def context(settings):
    return build_context(settings)


@pytest.fixture
def seeded_context(seeded_settings):
    return build_context(seeded_settings)


@pytest.fixture
def product():
    return Product(id="p-100", name="Desk Chair", price=100.0, category="Home", stock=10, discount=10)


@pytest.fixture
def plain_product():
    return Product(id="p-050", name="Mouse Pad", price=50.0, category="Accessories", stock=5)


@pytest.fixture
def percent_coupon():
    return Coupon(code="ten", type=CouponType.PERCENTAGE, value=10, minimum_amount=50)


@pytest.fixture
def fixed_coupon():
    return Coupon(code="TWENTY", type=CouponType.FIXED, value=20)


@pytest.fixture
def stocked_context(context, product, plain_product, percent_coupon, fixed_coupon):
    """Empty context with two products and two coupons added"""
    assert context.products.add_product(product)
    assert context.products.add_product(plain_product)
    assert context.coupons.add_coupon(percent_coupon)
    assert context.coupons.add_coupon(fixed_coupon)
    return context
