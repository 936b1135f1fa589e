"""Checkout API routes for the cart simulator"""

from fastapi import APIRouter, HTTPException, Depends

from ..core.context import AppContext
from ..models.checkout import (
    CheckoutRequest,
    CheckoutResponse,
    Order,
)
from .deps import get_context, get_writable_context

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutResponse)
def checkout(request: CheckoutRequest, context: AppContext = Depends(get_writable_context)):
    """
    Process checkout.

    Validation and stock problems come back with success=False and the list
    of errors; only an unknown cart is a 404.
    """
    result = context.checkout.checkout(request.cart_id)

    if result.is_not_found:
        raise HTTPException(status_code=404, detail=result.message)

    if not result:
        return CheckoutResponse(
            success=False,
            error_message=result.message,
            errors=result.errors,
        )

    return CheckoutResponse(success=True, order=result.value)


@router.get("/orders/{order_id}", response_model=Order)
async def get_order(order_id: str, context: AppContext = Depends(get_context)):
    """Get order details"""
    order = context.orders.get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("/orders", response_model=list[Order])
async def list_orders(limit: int = 50, context: AppContext = Depends(get_context)):
    """List recent orders"""
    return context.orders.list_orders(limit=limit)
