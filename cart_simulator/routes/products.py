"""Product API routes for the cart simulator"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Query, Depends

from ..core.context import AppContext
from ..models.product import (
    Product,
    ProductCreateRequest,
    ProductUpdateRequest,
    ProductSearchResponse,
)
from .deps import get_context, get_writable_context, raise_for_result

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductSearchResponse)
async def search_products(
    query: Optional[str] = Query(None, description="Search query"),
    category: Optional[str] = Query(None, description="Filter by category"),
    min_price: Optional[float] = Query(None, ge=0, description="Minimum final price"),
    max_price: Optional[float] = Query(None, ge=0, description="Maximum final price"),
    in_stock_only: bool = Query(False, description="Only show in-stock items"),
    limit: int = Query(20, ge=1, le=100, description="Max results"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    context: AppContext = Depends(get_context),
):
    """Search products in the catalog"""
    products, total = context.products.search_products(
        query=query,
        category=category,
        min_price=min_price,
        max_price=max_price,
        in_stock_only=in_stock_only,
        limit=limit,
        offset=offset,
    )

    return ProductSearchResponse(
        products=products,
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/categories", response_model=list[str])
async def list_categories(context: AppContext = Depends(get_context)):
    """List all product categories"""
    return context.products.get_categories()


@router.get("/discounted", response_model=list[Product])
async def list_discounted(context: AppContext = Depends(get_context)):
    """Products currently on sale"""
    return context.products.get_discounted_products()


@router.get("/top-rated", response_model=list[Product])
async def list_top_rated(
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    context: AppContext = Depends(get_context),
):
    """Best rated products first"""
    if min_rating is None:
        min_rating = context.settings.top_rated_min_rating
    return context.products.get_top_rated_products(min_rating)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, context: AppContext = Depends(get_context)):
    """Get a product by ID"""
    product = context.products.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=Product, status_code=201)
def create_product(request: ProductCreateRequest, context: AppContext = Depends(get_writable_context)):
    """Add a product to the catalog"""
    result = context.products.add_product(Product(**request.model_dump()))
    raise_for_result(result)
    return result.value


@router.put("/{product_id}", response_model=Product)
def update_product(
    product_id: str,
    request: ProductUpdateRequest,
    context: AppContext = Depends(get_writable_context),
):
    """Change product fields; invalid changes are refused as a whole"""
    result = context.products.update_product(product_id, **request.model_dump(exclude_none=True))
    raise_for_result(result)
    return result.value


@router.delete("/{product_id}")
def delete_product(product_id: str, context: AppContext = Depends(get_writable_context)):
    """Remove a product from the catalog"""
    if not context.products.remove_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product removed"}
