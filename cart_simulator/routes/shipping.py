"""Shipping API routes for the cart simulator"""

from fastapi import APIRouter, HTTPException, Query, Depends

from ..core.context import AppContext
from ..core.result import OperationResult, FailureReason
from ..models.cart import CartResponse
from ..models.shipping import (
    ShippingQuote,
    DeliveryAvailability,
    FreeShippingInfo,
    ShippingSelectionRequest,
    ShippingOptionsResponse,
)
from .deps import get_context, get_writable_context, raise_for_result

router = APIRouter(prefix="/api/shipping", tags=["Shipping"])


@router.get("/validate/{postal_code}")
async def validate_postal_code(postal_code: str, context: AppContext = Depends(get_context)):
    """Check a CEP and return it formatted"""
    valid = context.shipping.validate_postal_code(postal_code)
    return {
        "postal_code": context.shipping.format_postal_code(postal_code) if valid else postal_code,
        "valid": valid,
    }


@router.get("/quote", response_model=ShippingQuote)
async def quote_shipping(
    postal_code: str = Query(..., description="Destination CEP"),
    weight: float = Query(1.0, gt=0, description="Parcel weight in kg"),
    value: float = Query(0.0, ge=0, description="Order value"),
    context: AppContext = Depends(get_context),
):
    """Standard shipping quote for a CEP"""
    result = context.shipping.calculate_shipping(postal_code, weight, value)
    raise_for_result(result)
    return result.value


@router.get("/options", response_model=list[ShippingQuote])
async def shipping_options(
    postal_code: str = Query(..., description="Destination CEP"),
    weight: float = Query(1.0, gt=0, description="Parcel weight in kg"),
    value: float = Query(0.0, ge=0, description="Order value"),
    context: AppContext = Depends(get_context),
):
    """Economic, standard and express quotes for a CEP"""
    result = context.shipping.get_shipping_options(postal_code, weight, value)
    raise_for_result(result)
    return result.value


@router.get("/availability/{postal_code}", response_model=DeliveryAvailability)
async def delivery_availability(postal_code: str, context: AppContext = Depends(get_context)):
    return context.shipping.check_delivery_availability(postal_code)


@router.get("/free-shipping", response_model=FreeShippingInfo)
async def free_shipping_info(
    value: float = Query(..., ge=0),
    context: AppContext = Depends(get_context),
):
    """Progress toward the free-shipping threshold"""
    return context.shipping.get_free_shipping_info(value)


@router.get("/cart/{cart_id}", response_model=ShippingOptionsResponse)
async def cart_shipping_options(
    cart_id: str,
    postal_code: str = Query(..., description="Destination CEP"),
    context: AppContext = Depends(get_context),
):
    """Shipping options for the contents of a cart"""
    cart = context.carts.get_cart(cart_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    if cart.is_empty:
        raise HTTPException(status_code=400, detail="Cart is empty")

    weight = context.shipping.calculate_weight(cart.items)
    result = context.shipping.get_shipping_options(postal_code, weight, cart.subtotal)
    raise_for_result(result)

    return ShippingOptionsResponse(
        options=result.value,
        free_shipping=context.shipping.get_free_shipping_info(cart.subtotal),
        weight=weight,
    )


@router.post("/cart/{cart_id}", response_model=CartResponse)
def select_cart_shipping(
    cart_id: str,
    request: ShippingSelectionRequest,
    context: AppContext = Depends(get_writable_context),
):
    """Set the cart's address and the cost of the chosen shipping option"""
    cart = context.carts.get_cart(cart_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")

    availability = context.shipping.check_delivery_availability(request.address.postal_code)
    if not availability.available:
        raise_for_result(OperationResult.failure(FailureReason.DELIVERY_UNAVAILABLE, availability.reason))

    weight = context.shipping.calculate_weight(cart.items)
    result = context.shipping.get_quote(request.address.postal_code, request.type, weight, cart.subtotal)
    raise_for_result(result)
    quote: ShippingQuote = result.value

    context.carts.set_shipping_address(cart_id, request.address)
    context.carts.set_shipping_cost(cart_id, quote.cost)

    return CartResponse.from_cart(cart, message=f"{quote.name} shipping selected")
