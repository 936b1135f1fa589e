"""Checkout models for the cart simulator"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from .cart import FinancialSummary
from .shipping import ShippingAddress


class OrderStatus(str, Enum):
    CONFIRMED = "confirmed"


class OrderItem(BaseModel):
    """Line item frozen at checkout time"""
    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    category: str
    product: dict[str, Any]  # snapshot of the product as it was sold
    quantity: int
    unit_price: float
    final_unit_price: float
    subtotal: float
    original_subtotal: float
    total_discount: float


class AppliedCouponSnapshot(BaseModel):
    """Coupon as it stood when the order was placed"""
    model_config = ConfigDict(frozen=True)

    code: str
    type: str
    value: float
    discount: float
    description: str = ""


class Order(BaseModel):
    """Immutable record of a completed checkout"""
    model_config = ConfigDict(frozen=True)

    order_id: str
    cart_id: str
    user_id: Optional[str] = None
    status: OrderStatus = OrderStatus.CONFIRMED
    items: tuple[OrderItem, ...]
    summary: FinancialSummary
    shipping_address: Optional[ShippingAddress] = None
    applied_coupons: tuple[AppliedCouponSnapshot, ...] = ()
    processed_at: datetime


class CheckoutRequest(BaseModel):
    """Request to checkout"""
    cart_id: str


class CheckoutResponse(BaseModel):
    """Response from checkout"""
    success: bool
    order: Optional[Order] = None
    error_message: Optional[str] = None
    errors: list[str] = []
