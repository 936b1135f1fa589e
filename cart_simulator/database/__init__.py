# Database modules

from .storage import JsonFileStore, StorageError
from .products import ProductDatabase
from .coupons import CouponDatabase
from .carts import CartDatabase
from .orders import OrderDatabase

__all__ = [
    "JsonFileStore",
    "StorageError",
    "ProductDatabase",
    "CouponDatabase",
    "CartDatabase",
    "OrderDatabase",
]
