"""Cart API routes for the cart simulator"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from ..core.context import AppContext
from ..models.cart import (
    CreateCartRequest,
    AddToCartRequest,
    UpdateCartItemRequest,
    ApplyCouponRequest,
    CartResponse,
    CartStatistics,
)
from .deps import get_context, get_writable_context, raise_for_result

router = APIRouter(prefix="/api/cart", tags=["Cart"])


@router.post("", response_model=CartResponse, status_code=201)
def create_cart(
    request: Optional[CreateCartRequest] = None,
    context: AppContext = Depends(get_writable_context),
):
    """Create a new shopping cart"""
    user_id = request.user_id if request else None
    cart = context.carts.create_cart(user_id)
    return CartResponse.from_cart(cart, message="Cart created")


@router.get("", response_model=list[CartResponse])
async def list_carts(context: AppContext = Depends(get_context)):
    """List all carts"""
    return [CartResponse.from_cart(cart) for cart in context.carts.get_all_carts()]


@router.get("/abandoned", response_model=list[CartResponse])
async def list_abandoned_carts(
    days: Optional[int] = Query(None, ge=0),
    context: AppContext = Depends(get_context),
):
    """Non-empty carts left untouched for a number of days"""
    if days is None:
        days = context.settings.abandoned_cart_days
    return [CartResponse.from_cart(cart) for cart in context.carts.get_abandoned_carts(days)]


@router.get("/user/{user_id}", response_model=CartResponse)
async def get_user_cart(user_id: str, context: AppContext = Depends(get_context)):
    """Get a user's cart"""
    cart = context.carts.get_cart_by_user(user_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    return CartResponse.from_cart(cart)


@router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str, context: AppContext = Depends(get_context)):
    """Get cart by ID"""
    cart = context.carts.get_cart(cart_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    return CartResponse.from_cart(cart)


@router.get("/{cart_id}/statistics", response_model=CartStatistics)
async def get_cart_statistics(cart_id: str, context: AppContext = Depends(get_context)):
    """Item, category and discount figures for a cart"""
    statistics = context.carts.get_cart_statistics(cart_id)
    if not statistics:
        raise HTTPException(status_code=404, detail="Cart not found")
    return statistics


@router.post("/{cart_id}/items", response_model=CartResponse)
def add_to_cart(
    cart_id: str,
    request: AddToCartRequest,
    context: AppContext = Depends(get_writable_context),
):
    """Add an item to the cart"""
    result = context.carts.add_product_to_cart(cart_id, request.product_id, request.quantity)
    raise_for_result(result)

    return CartResponse.from_cart(
        context.carts.get_cart(cart_id),
        message=f"Added {request.quantity}x {result.value.product.name} to cart",
    )


@router.put("/{cart_id}/items/{product_id}", response_model=CartResponse)
def update_cart_item(
    cart_id: str,
    product_id: str,
    request: UpdateCartItemRequest,
    context: AppContext = Depends(get_writable_context),
):
    """Update item quantity in cart"""
    result = context.carts.update_product_quantity(cart_id, product_id, request.quantity)
    raise_for_result(result)
    return CartResponse.from_cart(context.carts.get_cart(cart_id), message="Cart updated")


@router.delete("/{cart_id}/items/{product_id}", response_model=CartResponse)
def remove_from_cart(
    cart_id: str,
    product_id: str,
    context: AppContext = Depends(get_writable_context),
):
    """Remove an item from the cart"""
    result = context.carts.remove_product_from_cart(cart_id, product_id)
    raise_for_result(result)
    return CartResponse.from_cart(context.carts.get_cart(cart_id), message="Item removed")


@router.post("/{cart_id}/coupons", response_model=CartResponse)
def apply_coupon(
    cart_id: str,
    request: ApplyCouponRequest,
    context: AppContext = Depends(get_writable_context),
):
    """Apply a coupon code to the cart"""
    result = context.carts.apply_coupon_to_cart(cart_id, request.code)
    raise_for_result(result)
    return CartResponse.from_cart(
        context.carts.get_cart(cart_id),
        message=f"Coupon {result.value.code} applied",
    )


@router.delete("/{cart_id}/coupons/{code}", response_model=CartResponse)
def remove_coupon(cart_id: str, code: str, context: AppContext = Depends(get_writable_context)):
    """Remove a coupon from the cart"""
    result = context.carts.remove_coupon_from_cart(cart_id, code)
    raise_for_result(result)
    return CartResponse.from_cart(context.carts.get_cart(cart_id), message="Coupon removed")


@router.delete("/{cart_id}", response_model=CartResponse)
def clear_cart(cart_id: str, context: AppContext = Depends(get_writable_context)):
    """Clear all items and coupons from cart"""
    result = context.carts.clear_cart(cart_id)
    raise_for_result(result)
    return CartResponse.from_cart(result.value, message="Cart cleared")
