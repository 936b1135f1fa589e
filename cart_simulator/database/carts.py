"""Cart storage for the cart simulator"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from ..core.result import OperationResult, FailureReason
from ..models.cart import CartItem, CartStatistics, ShoppingCart
from ..models.shipping import ShippingAddress
from .coupons import CouponDatabase
from .products import ProductDatabase
from .storage import JsonFileStore, StorageError

logger = logging.getLogger(__name__)


class CartItemRecord(BaseModel):
    """Persisted line item; the product is resolved against the catalog on load"""
    product_id: str
    quantity: int
    added_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class CartRecord(BaseModel):
    """Persisted cart; coupons are stored by code"""
    id: str
    user_id: Optional[str] = None
    items: list[CartItemRecord] = []
    coupon_codes: list[str] = []
    shipping_address: Optional[ShippingAddress] = None
    shipping_cost: float = 0.0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def from_cart(cls, cart: ShoppingCart) -> "CartRecord":
        return cls(
            id=cart.id,
            user_id=cart.user_id,
            items=[
                CartItemRecord(
                    product_id=item.product.id,
                    quantity=item.quantity,
                    added_at=item.added_at,
                    updated_at=item.updated_at,
                )
                for item in cart.items
            ],
            coupon_codes=[c.code for c in cart.applied_coupons],
            shipping_address=cart.shipping_address,
            shipping_cost=cart.shipping_cost,
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )


class CartDatabase:
    """
    Carts keyed by ID, persisted to a JSON file.

    Wraps the cart's own rules with catalog/coupon lookups and saves after
    every successful change.
    """

    def __init__(
        self,
        store: JsonFileStore,
        product_db: ProductDatabase,
        coupon_db: CouponDatabase,
        item_weight: float = 0.5,
    ):
        self.store = store
        self.product_db = product_db
        self.coupon_db = coupon_db
        self.item_weight = item_weight
        self.carts: dict[str, ShoppingCart] = {}

    # ==================== Persistence ====================

    def load(self) -> None:
        """Load carts, re-linking items and coupons to the live catalog and coupon store"""
        records = self.store.load()
        self.carts.clear()

        if records is None:
            return

        for raw in records:
            try:
                record = CartRecord.model_validate(raw)
            except ValidationError as e:
                raise StorageError(f"Invalid cart record in {self.store.path}: {e}") from e
            cart = self._restore(record)
            self.carts[cart.id] = cart

        logger.info(f"Loaded {len(self.carts)} carts")

    def _restore(self, record: CartRecord) -> ShoppingCart:
        cart = ShoppingCart(
            id=record.id,
            user_id=record.user_id,
            shipping_address=record.shipping_address,
            shipping_cost=record.shipping_cost,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

        for item_record in record.items:
            product = self.product_db.get_product(item_record.product_id)
            if not product:
                logger.warning(f"Dropping item {item_record.product_id} from cart {record.id}: product not found")
                continue
            cart.items.append(CartItem(
                product=product,
                quantity=item_record.quantity,
                added_at=item_record.added_at,
                updated_at=item_record.updated_at,
            ))

        for code in record.coupon_codes:
            coupon = self.coupon_db.get_coupon(code)
            if not coupon:
                logger.warning(f"Dropping coupon {code} from cart {record.id}: coupon not found")
                continue
            cart.applied_coupons.append(coupon)

        return cart

    def save(self) -> None:
        self.store.save([
            CartRecord.from_cart(cart).model_dump(mode="json")
            for cart in self.carts.values()
        ])

    # ==================== Carts ====================

    def create_cart(self, user_id: Optional[str] = None) -> ShoppingCart:
        """Create a new cart"""
        cart = ShoppingCart(user_id=user_id)
        self.carts[cart.id] = cart
        self.save()
        return cart

    def get_cart(self, cart_id: str) -> Optional[ShoppingCart]:
        """Get a cart by ID"""
        return self.carts.get(cart_id)

    def get_cart_by_user(self, user_id: str) -> Optional[ShoppingCart]:
        return next((cart for cart in self.carts.values() if cart.user_id == user_id), None)

    def get_or_create_cart(self, cart_id: Optional[str] = None, user_id: Optional[str] = None) -> ShoppingCart:
        """Get existing cart or create new one"""
        if cart_id and cart_id in self.carts:
            return self.carts[cart_id]
        return self.create_cart(user_id)

    def get_all_carts(self) -> list[ShoppingCart]:
        return list(self.carts.values())

    def get_abandoned_carts(self, days: int = 7) -> list[ShoppingCart]:
        """Non-empty carts untouched for more than days"""
        cutoff = datetime.utcnow() - timedelta(days=days)
        return [cart for cart in self.carts.values() if not cart.is_empty and cart.updated_at < cutoff]

    def remove_cart(self, cart_id: str) -> bool:
        """Delete a cart"""
        if cart_id not in self.carts:
            return False

        del self.carts[cart_id]
        self.save()
        return True

    def _cart_not_found(self) -> OperationResult:
        return OperationResult.failure(FailureReason.CART_NOT_FOUND, "Cart not found")

    # ==================== Items ====================

    def add_product_to_cart(self, cart_id: str, product_id: str, quantity: int = 1) -> OperationResult:
        """Add an item to the cart"""
        cart = self.get_cart(cart_id)
        if not cart:
            return self._cart_not_found()

        product = self.product_db.get_product(product_id)
        if not product:
            return OperationResult.failure(FailureReason.PRODUCT_NOT_FOUND, "Product not found")

        result = cart.add_product(product, quantity)
        if result:
            self.save()
            logger.info(f"Added {quantity}x {product.name} to cart {cart_id}")
        return result

    def remove_product_from_cart(self, cart_id: str, product_id: str) -> OperationResult:
        cart = self.get_cart(cart_id)
        if not cart:
            return self._cart_not_found()

        result = cart.remove_product(product_id)
        if result:
            self.save()
        return result

    def update_product_quantity(self, cart_id: str, product_id: str, quantity: int) -> OperationResult:
        """Update item quantity in cart; zero removes the item"""
        cart = self.get_cart(cart_id)
        if not cart:
            return self._cart_not_found()

        if quantity > 0 and not self.product_db.get_product(product_id):
            return OperationResult.failure(FailureReason.PRODUCT_NOT_FOUND, "Product not found")

        result = cart.update_product_quantity(product_id, quantity)
        if result:
            self.save()
        return result

    def clear_cart(self, cart_id: str) -> OperationResult:
        """Empty a cart, giving back the uses of its coupons"""
        cart = self.get_cart(cart_id)
        if not cart:
            return self._cart_not_found()

        for coupon in cart.applied_coupons:
            coupon.revert()
        if cart.applied_coupons:
            self.coupon_db.save()

        cart.clear()
        self.save()
        return OperationResult.success(cart)

    # ==================== Coupons ====================

    def apply_coupon_to_cart(self, cart_id: str, code: str) -> OperationResult:
        """Attach a coupon to a cart and count the use against the coupon"""
        cart = self.get_cart(cart_id)
        if not cart:
            return self._cart_not_found()

        coupon = self.coupon_db.get_coupon(code)
        if not coupon:
            return OperationResult.failure(FailureReason.COUPON_NOT_FOUND, "Coupon not found")

        result = cart.apply_coupon(coupon)
        if not result:
            return result

        usage = coupon.apply()
        if not usage:
            cart.remove_coupon(coupon.code)
            return usage

        self.coupon_db.save()
        self.save()
        logger.info(f"Coupon {coupon.code} applied to cart {cart_id} (use {coupon.usage_count})")
        return OperationResult.success(coupon)

    def remove_coupon_from_cart(self, cart_id: str, code: str) -> OperationResult:
        cart = self.get_cart(cart_id)
        if not cart:
            return self._cart_not_found()

        result = cart.remove_coupon(code)
        if not result:
            return result

        coupon = self.coupon_db.get_coupon(code)
        if coupon:
            coupon.revert()
            self.coupon_db.save()

        self.save()
        return result

    # ==================== Shipping ====================

    def set_shipping_address(self, cart_id: str, address: Optional[ShippingAddress]) -> OperationResult:
        cart = self.get_cart(cart_id)
        if not cart:
            return self._cart_not_found()

        cart.set_shipping_address(address)
        self.save()
        return OperationResult.success(cart)

    def set_shipping_cost(self, cart_id: str, cost: float) -> OperationResult:
        cart = self.get_cart(cart_id)
        if not cart:
            return self._cart_not_found()

        cart.set_shipping_cost(cost)
        self.save()
        return OperationResult.success(cart)

    # ==================== Statistics ====================

    def get_cart_statistics(self, cart_id: str) -> Optional[CartStatistics]:
        cart = self.get_cart(cart_id)
        if not cart:
            return None

        categories: Counter[str] = Counter()
        for item in cart.items:
            categories[item.product.category] += item.quantity

        total_items = cart.total_items
        summary = cart.financial_summary()

        return CartStatistics(
            total_items=total_items,
            unique_products=len(cart.items),
            categories_count=len(categories),
            categories_breakdown=dict(categories),
            estimated_weight=total_items * self.item_weight,
            average_item_price=summary.subtotal / total_items if total_items else 0.0,
            has_discounts=summary.product_discounts > 0 or summary.coupon_discounts > 0,
            is_empty=cart.is_empty,
        )
