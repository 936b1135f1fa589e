"""Wiring of settings, stores and services into one application context"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from .config import Settings, get_settings
from ..database.storage import JsonFileStore
from ..database.products import ProductDatabase
from ..database.coupons import CouponDatabase
from ..database.carts import CartDatabase
from ..database.orders import OrderDatabase
from ..services.shipping import ShippingService
from ..services.checkout import CheckoutService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything the API and terminal menu need, built from one Settings"""
    settings: Settings
    products: ProductDatabase
    coupons: CouponDatabase
    carts: CartDatabase
    orders: OrderDatabase
    shipping: ShippingService
    checkout: CheckoutService
    write_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


def build_context(settings: Optional[Settings] = None) -> AppContext:
    """Create the stores, load them from disk and wire the services"""
    settings = settings or get_settings()

    products = ProductDatabase(
        JsonFileStore(settings.collection_path("products"), "products"),
        max_name_length=settings.product_max_name_length,
        seed_sample_data=settings.seed_sample_data,
    )
    coupons = CouponDatabase(
        JsonFileStore(settings.collection_path("coupons"), "coupons"),
        seed_sample_data=settings.seed_sample_data,
    )
    carts = CartDatabase(
        JsonFileStore(settings.collection_path("carts"), "carts"),
        products,
        coupons,
        item_weight=settings.default_item_weight,
    )
    orders = OrderDatabase(JsonFileStore(settings.collection_path("orders"), "orders"))

    # Carts resolve against products and coupons, so they load last
    products.load()
    coupons.load()
    carts.load()
    orders.load()

    logger.info(f"Data loaded from {settings.data_path.resolve()}")

    return AppContext(
        settings=settings,
        products=products,
        coupons=coupons,
        carts=carts,
        orders=orders,
        shipping=ShippingService(settings),
        checkout=CheckoutService(carts, products, orders),
    )
