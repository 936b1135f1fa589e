# API Routes

from .products import router as products_router
from .cart import router as cart_router
from .coupons import router as coupons_router
from .shipping import router as shipping_router
from .checkout import router as checkout_router

__all__ = ["products_router", "cart_router", "coupons_router", "shipping_router", "checkout_router"]
