# Cart Simulator Models

from .product import Product, ProductCreateRequest, ProductUpdateRequest, ProductSearchResponse
from .coupon import (
    Coupon,
    CouponType,
    CouponStatus,
    CouponCreateRequest,
    CouponUpdateRequest,
    CouponValidationResponse,
)
from .shipping import (
    ShippingAddress,
    ShippingType,
    ShippingRate,
    ShippingQuote,
    DeliveryAvailability,
    FreeShippingInfo,
    ShippingSelectionRequest,
    ShippingOptionsResponse,
)
from .cart import (
    CartItem,
    ShoppingCart,
    FinancialSummary,
    CreateCartRequest,
    AddToCartRequest,
    UpdateCartItemRequest,
    ApplyCouponRequest,
    CartResponse,
    CartStatistics,
)
from .checkout import (
    Order,
    OrderItem,
    OrderStatus,
    AppliedCouponSnapshot,
    CheckoutRequest,
    CheckoutResponse,
)

__all__ = [
    "Product",
    "ProductCreateRequest",
    "ProductUpdateRequest",
    "ProductSearchResponse",
    "Coupon",
    "CouponType",
    "CouponStatus",
    "CouponCreateRequest",
    "CouponUpdateRequest",
    "CouponValidationResponse",
    "ShippingAddress",
    "ShippingType",
    "ShippingRate",
    "ShippingQuote",
    "DeliveryAvailability",
    "FreeShippingInfo",
    "ShippingSelectionRequest",
    "ShippingOptionsResponse",
    "CartItem",
    "ShoppingCart",
    "FinancialSummary",
    "CreateCartRequest",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "ApplyCouponRequest",
    "CartResponse",
    "CartStatistics",
    "Order",
    "OrderItem",
    "OrderStatus",
    "AppliedCouponSnapshot",
    "CheckoutRequest",
    "CheckoutResponse",
]
