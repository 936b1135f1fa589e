"""Coupon API routes for the cart simulator"""

from typing import Any, Optional
from fastapi import APIRouter, HTTPException, Query, Depends

from ..core.context import AppContext
from ..models.coupon import (
    Coupon,
    CouponType,
    CouponCreateRequest,
    CouponUpdateRequest,
    CouponValidationResponse,
)
from .deps import get_context, get_writable_context, raise_for_result

router = APIRouter(prefix="/api/coupons", tags=["Coupons"])


@router.get("", response_model=list[Coupon])
async def list_coupons(
    type: Optional[CouponType] = Query(None, description="Filter by coupon type"),
    context: AppContext = Depends(get_context),
):
    """List all coupons"""
    if type:
        return context.coupons.get_coupons_by_type(type)
    return context.coupons.get_all_coupons()


@router.get("/active", response_model=list[Coupon])
async def list_active_coupons(context: AppContext = Depends(get_context)):
    """Coupons that can be used right now"""
    return context.coupons.get_active_coupons()


@router.get("/expiring", response_model=list[Coupon])
async def list_expiring_coupons(
    days: Optional[int] = Query(None, ge=0),
    context: AppContext = Depends(get_context),
):
    """Valid coupons that expire soon"""
    if days is None:
        days = context.settings.expiring_coupon_days
    return context.coupons.get_expiring_coupons(days)


@router.get("/statistics")
async def coupon_statistics(context: AppContext = Depends(get_context)) -> dict[str, Any]:
    return context.coupons.get_coupon_statistics()


@router.get("/search", response_model=list[Coupon])
async def search_coupons(
    query: str = Query(..., min_length=1),
    context: AppContext = Depends(get_context),
):
    """Search coupons by code or description"""
    return context.coupons.search_coupons(query)


@router.get("/{code}", response_model=Coupon)
async def get_coupon(code: str, context: AppContext = Depends(get_context)):
    """Get a coupon by code"""
    coupon = context.coupons.get_coupon(code)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return coupon


@router.get("/{code}/validate", response_model=CouponValidationResponse)
async def validate_coupon(
    code: str,
    amount: float = Query(..., ge=0, description="Amount the coupon would discount"),
    context: AppContext = Depends(get_context),
):
    """
    Check a coupon against an amount.

    An unknown code is a 404; a known but unusable coupon is reported in the body.
    """
    result = context.coupons.validate_coupon(code, amount)
    if result.is_not_found:
        raise HTTPException(status_code=404, detail=result.message)

    if not result:
        return CouponValidationResponse(code=code.strip().upper(), is_valid=False, error=result.message)

    return CouponValidationResponse(
        code=result.value["coupon"].code,
        is_valid=True,
        discount=result.value["discount"],
        final_amount=result.value["final_amount"],
    )


@router.post("", response_model=Coupon, status_code=201)
def create_coupon(request: CouponCreateRequest, context: AppContext = Depends(get_writable_context)):
    """Add a coupon"""
    result = context.coupons.add_coupon(Coupon(**request.model_dump()))
    raise_for_result(result)
    return result.value


@router.put("/{code}", response_model=Coupon)
def update_coupon(
    code: str,
    request: CouponUpdateRequest,
    context: AppContext = Depends(get_writable_context),
):
    """Change coupon fields"""
    result = context.coupons.update_coupon(code, **request.changes())
    raise_for_result(result)
    return result.value


@router.post("/{code}/activate", response_model=Coupon)
def activate_coupon(code: str, context: AppContext = Depends(get_writable_context)):
    if not context.coupons.activate_coupon(code):
        raise HTTPException(status_code=404, detail="Coupon not found")
    return context.coupons.get_coupon(code)


@router.post("/{code}/deactivate", response_model=Coupon)
def deactivate_coupon(code: str, context: AppContext = Depends(get_writable_context)):
    if not context.coupons.deactivate_coupon(code):
        raise HTTPException(status_code=404, detail="Coupon not found")
    return context.coupons.get_coupon(code)


@router.delete("/{code}")
def delete_coupon(code: str, context: AppContext = Depends(get_writable_context)):
    """Remove a coupon"""
    if not context.coupons.remove_coupon(code):
        raise HTTPException(status_code=404, detail="Coupon not found")
    return {"message": "Coupon removed"}
