"""Product models for the cart simulator"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from ..core.result import OperationResult, FailureReason

DEFAULT_MAX_NAME_LENGTH = 100

UPDATABLE_FIELDS = ("name", "price", "category", "description", "stock", "image", "rating", "discount")


class Product(BaseModel):
    """
    Product in the catalog.

    Range checks live in validate() rather than on the fields, so a product
    loaded with bad data can still be inspected and reported on.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    price: float
    category: str
    description: str = ""
    stock: int = 0
    image: str = ""
    rating: float = 0.0
    discount: float = 0.0  # percent
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @computed_field
    @property
    def final_price(self) -> float:
        """Price with the product discount applied"""
        discount = min(max(self.discount, 0.0), 100.0)
        if discount > 0:
            return self.price * (1 - discount / 100)
        return self.price

    @computed_field
    @property
    def discount_amount(self) -> float:
        return self.price - self.final_price

    @property
    def has_discount(self) -> bool:
        return self.discount > 0

    def is_available(self, quantity: int = 1) -> bool:
        """Check if enough stock is on hand"""
        return self.stock >= quantity

    def reduce_stock(self, quantity: int) -> OperationResult:
        """Take quantity out of stock, leaving it untouched if not available"""
        if not self.is_available(quantity):
            return OperationResult.failure(
                FailureReason.INSUFFICIENT_STOCK,
                f"Insufficient stock for {self.name}. Available: {self.stock}",
            )

        self.stock -= quantity
        self.updated_at = datetime.utcnow()
        return OperationResult.success(self.stock)

    def increase_stock(self, quantity: int) -> None:
        self.stock += quantity
        self.updated_at = datetime.utcnow()

    def update(self, **changes) -> None:
        """Apply field updates, ignoring anything that is not editable"""
        for name in UPDATABLE_FIELDS:
            if name in changes:
                setattr(self, name, changes[name])
        self.updated_at = datetime.utcnow()

    def validate(self, max_name_length: int = DEFAULT_MAX_NAME_LENGTH) -> list[str]:
        """Return the list of problems with this product (empty if valid)"""
        errors = []

        if not self.name or not self.name.strip():
            errors.append("Product name is required")
        elif len(self.name) > max_name_length:
            errors.append(f"Product name must be at most {max_name_length} characters")

        if self.price <= 0:
            errors.append("Price must be greater than zero")

        if not self.category or not self.category.strip():
            errors.append("Category is required")

        if self.stock < 0:
            errors.append("Stock cannot be negative")

        if self.rating < 0 or self.rating > 5:
            errors.append("Rating must be between 0 and 5")

        if self.discount < 0 or self.discount > 100:
            errors.append("Discount must be between 0 and 100%")

        return errors


class ProductCreateRequest(BaseModel):
    """Request to add a product to the catalog"""
    name: str = Field(min_length=1)
    price: float = Field(gt=0)
    category: str = Field(min_length=1)
    description: str = ""
    stock: int = Field(default=0, ge=0)
    image: str = ""
    rating: float = Field(default=0.0, ge=0, le=5)
    discount: float = Field(default=0.0, ge=0, le=100)


class ProductUpdateRequest(BaseModel):
    """Request to change product fields"""
    name: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    description: Optional[str] = None
    stock: Optional[int] = None
    image: Optional[str] = None
    rating: Optional[float] = None
    discount: Optional[float] = None


class ProductSearchResponse(BaseModel):
    """Response from product search"""
    products: list[Product]
    total: int
    limit: int
    offset: int
