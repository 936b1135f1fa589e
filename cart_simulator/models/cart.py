"""Cart models for the cart simulator"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..core.result import OperationResult, FailureReason
from .shipping import ShippingAddress
from .coupon import Coupon
from .product import Product


class CartItem(BaseModel):
    """
    Item in a shopping cart.

    The product is the catalog's own instance, so price, discount and stock
    changes made through the catalog show up here immediately.
    """
    product: Product
    quantity: int = 1
    added_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def product_id(self) -> str:
        return self.product.id

    @computed_field
    @property
    def subtotal(self) -> float:
        return self.product.final_price * self.quantity

    @computed_field
    @property
    def original_subtotal(self) -> float:
        return self.product.price * self.quantity

    @computed_field
    @property
    def total_discount(self) -> float:
        return self.product.discount_amount * self.quantity

    def update_quantity(self, new_quantity: int) -> OperationResult:
        """Set the quantity if it is positive and in stock"""
        if new_quantity <= 0:
            return OperationResult.failure(
                FailureReason.INVALID_QUANTITY,
                "Quantity must be greater than zero",
            )

        if not self.product.is_available(new_quantity):
            return OperationResult.failure(
                FailureReason.INSUFFICIENT_STOCK,
                f"Insufficient stock for {self.product.name}. Available: {self.product.stock}",
            )

        self.quantity = new_quantity
        self.updated_at = datetime.utcnow()
        return OperationResult.success(self.quantity)

    def increase_quantity(self, amount: int = 1) -> OperationResult:
        return self.update_quantity(self.quantity + amount)

    def decrease_quantity(self, amount: int = 1) -> OperationResult:
        return self.update_quantity(self.quantity - amount)

    def is_same_product(self, other: "CartItem") -> bool:
        return self.product.id == other.product.id

    def combine_with(self, other: "CartItem") -> OperationResult:
        """Fold another item of the same product into this one"""
        if not self.is_same_product(other):
            return OperationResult.failure(
                FailureReason.PRODUCT_MISMATCH,
                "Only items of the same product can be combined",
            )
        return self.update_quantity(self.quantity + other.quantity)

    def validate(self) -> list[str]:
        errors = list(self.product.validate())

        if self.quantity <= 0:
            errors.append("Quantity must be greater than zero")

        if not self.product.is_available(self.quantity):
            errors.append(
                f"Requested quantity ({self.quantity}) not available in stock ({self.product.stock})"
            )

        return errors


class FinancialSummary(BaseModel):
    """Cart totals, each step built on the previous one"""
    model_config = ConfigDict(frozen=True)

    original_subtotal: float
    product_discounts: float
    subtotal: float
    coupon_discounts: float
    shipping_cost: float
    total: float
    total_savings: float


class ShoppingCart(BaseModel):
    """Shopping cart"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: Optional[str] = None
    items: list[CartItem] = []
    applied_coupons: list[Coupon] = []
    shipping_address: Optional[ShippingAddress] = None
    shipping_cost: float = 0.0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def _touch(self) -> None:
        self.updated_at = datetime.utcnow()

    # ==================== Items ====================

    def get_item(self, product_id: str) -> Optional[CartItem]:
        """Get the line item for a product"""
        return next((item for item in self.items if item.product.id == product_id), None)

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def add_product(self, product: Optional[Product], quantity: int = 1) -> OperationResult:
        """Add a product, merging into its existing line item if there is one"""
        if product is None:
            return OperationResult.failure(FailureReason.PRODUCT_NOT_FOUND, "Product not found")

        if quantity <= 0:
            return OperationResult.failure(
                FailureReason.INVALID_QUANTITY,
                "Quantity must be greater than zero",
            )

        if not product.is_available(quantity):
            return OperationResult.failure(
                FailureReason.INSUFFICIENT_STOCK,
                f"Insufficient stock for {product.name}. Available: {product.stock}",
            )

        existing_item = self.get_item(product.id)
        if existing_item:
            result = existing_item.update_quantity(existing_item.quantity + quantity)
            if result:
                self._touch()
                return OperationResult.success(existing_item)
            return result

        new_item = CartItem(product=product, quantity=quantity)
        errors = new_item.validate()
        if errors:
            return OperationResult.failure(
                FailureReason.INVALID_ITEM,
                f"Cannot add {product.name} to cart",
                errors=errors,
            )

        self.items.append(new_item)
        self._touch()
        return OperationResult.success(new_item)

    def remove_product(self, product_id: str) -> OperationResult:
        remaining = [item for item in self.items if item.product.id != product_id]
        if len(remaining) == len(self.items):
            return OperationResult.failure(FailureReason.ITEM_NOT_IN_CART, "Item not in cart")

        self.items = remaining
        self._touch()
        return OperationResult.success()

    def update_product_quantity(self, product_id: str, new_quantity: int) -> OperationResult:
        """Change a line item's quantity; zero or less removes it"""
        if new_quantity <= 0:
            return self.remove_product(product_id)

        item = self.get_item(product_id)
        if not item:
            return OperationResult.failure(FailureReason.ITEM_NOT_IN_CART, "Item not in cart")

        result = item.update_quantity(new_quantity)
        if result:
            self._touch()
        return result

    def clear(self) -> None:
        """Drop items and coupons; the shipping cost is kept"""
        self.items = []
        self.applied_coupons = []
        self._touch()

    # ==================== Totals ====================

    @property
    def original_subtotal(self) -> float:
        return sum(item.original_subtotal for item in self.items)

    @property
    def product_discounts(self) -> float:
        return sum(item.total_discount for item in self.items)

    @property
    def subtotal(self) -> float:
        return self.original_subtotal - self.product_discounts

    @property
    def coupon_discounts(self) -> float:
        # Every coupon is measured against the same subtotal, they do not compound
        subtotal = self.subtotal
        return sum(coupon.calculate_discount(subtotal, held=True) for coupon in self.applied_coupons)

    @property
    def total(self) -> float:
        return max(0.0, self.subtotal - self.coupon_discounts + self.shipping_cost)

    def financial_summary(self) -> FinancialSummary:
        """Snapshot of the totals pipeline"""
        original_subtotal = self.original_subtotal
        product_discounts = self.product_discounts
        subtotal = original_subtotal - product_discounts
        coupon_discounts = sum(c.calculate_discount(subtotal, held=True) for c in self.applied_coupons)

        return FinancialSummary(
            original_subtotal=original_subtotal,
            product_discounts=product_discounts,
            subtotal=subtotal,
            coupon_discounts=coupon_discounts,
            shipping_cost=self.shipping_cost,
            total=max(0.0, subtotal - coupon_discounts + self.shipping_cost),
            total_savings=product_discounts + coupon_discounts,
        )

    # ==================== Coupons ====================

    def has_coupon(self, code: str) -> bool:
        code = code.strip().upper()
        return any(c.code == code for c in self.applied_coupons)

    def apply_coupon(self, coupon: Optional[Coupon]) -> OperationResult:
        """
        Attach a coupon to the cart.

        Does not count a use of the coupon; the caller does that once the cart
        has accepted it. From then on the cart treats one counted use as its
        own, so taking the last allowed use does not void the discount.
        """
        if coupon is None or not coupon.code:
            return OperationResult.failure(FailureReason.COUPON_NOT_FOUND, "Coupon not found")

        if not coupon.is_valid():
            return OperationResult.failure(FailureReason.COUPON_INVALID, coupon.status_message())

        if self.has_coupon(coupon.code):
            return OperationResult.failure(
                FailureReason.COUPON_ALREADY_APPLIED,
                f"Coupon {coupon.code} is already applied",
            )

        if self.subtotal < coupon.minimum_amount:
            return OperationResult.failure(
                FailureReason.MINIMUM_NOT_MET,
                f"Minimum amount of R$ {coupon.minimum_amount:.2f} not reached",
            )

        self.applied_coupons.append(coupon)
        self._touch()
        return OperationResult.success(coupon)

    def remove_coupon(self, code: str) -> OperationResult:
        code = code.strip().upper()
        remaining = [c for c in self.applied_coupons if c.code != code]
        if len(remaining) == len(self.applied_coupons):
            return OperationResult.failure(
                FailureReason.COUPON_NOT_APPLIED,
                f"Coupon {code} is not applied to this cart",
            )

        self.applied_coupons = remaining
        self._touch()
        return OperationResult.success()

    # ==================== Shipping ====================

    def set_shipping_address(self, address: Optional[ShippingAddress]) -> None:
        self.shipping_address = address
        self._touch()

    def set_shipping_cost(self, cost: float) -> None:
        self.shipping_cost = max(0.0, cost)
        self._touch()

    def validate(self) -> list[str]:
        """Pre-checkout check of items and coupons"""
        errors = []

        if self.is_empty:
            errors.append("Cart is empty")

        for item in self.items:
            item_errors = item.validate()
            if item_errors:
                errors.append(f"Item {item.product.name}: {', '.join(item_errors)}")

        for coupon in self.applied_coupons:
            if not coupon.is_valid(held=True):
                errors.append(f"Coupon {coupon.code} is no longer valid")

        return errors


class CreateCartRequest(BaseModel):
    """Request to create a cart"""
    user_id: Optional[str] = None


class AddToCartRequest(BaseModel):
    """Request to add item to cart"""
    product_id: str
    quantity: int = Field(default=1, gt=0)


class UpdateCartItemRequest(BaseModel):
    """Request to update cart item quantity"""
    quantity: int = Field(ge=0)


class ApplyCouponRequest(BaseModel):
    """Request to apply a coupon code to a cart"""
    code: str = Field(min_length=1)


class CartResponse(BaseModel):
    """Cart API response"""
    cart: ShoppingCart
    summary: FinancialSummary
    total_items: int
    message: Optional[str] = None

    @classmethod
    def from_cart(cls, cart: ShoppingCart, message: Optional[str] = None) -> "CartResponse":
        return cls(
            cart=cart,
            summary=cart.financial_summary(),
            total_items=cart.total_items,
            message=message,
        )


class CartStatistics(BaseModel):
    """Aggregate figures about a cart's contents"""
    total_items: int
    unique_products: int
    categories_count: int
    categories_breakdown: dict[str, int]
    estimated_weight: float
    average_item_price: float
    has_discounts: bool
    is_empty: bool
