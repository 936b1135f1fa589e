"""
Checkout Service

Turns a validated cart into an immutable order: commits stock against the
catalog, then snapshots the cart's items and totals, empties the cart and
stores the order.
"""

import logging
import uuid
from datetime import datetime

from ..core.result import OperationResult, FailureReason
from ..database.carts import CartDatabase
from ..database.orders import OrderDatabase
from ..database.products import ProductDatabase
from ..models.cart import ShoppingCart
from ..models.checkout import Order, OrderItem, AppliedCouponSnapshot

logger = logging.getLogger(__name__)


class CheckoutService:
    """Orchestrates checkout across the cart, catalog and order stores"""

    def __init__(self, cart_db: CartDatabase, product_db: ProductDatabase, order_db: OrderDatabase):
        self.cart_db = cart_db
        self.product_db = product_db
        self.order_db = order_db

    def checkout(self, cart_id: str) -> OperationResult:
        """
        Place an order for a cart.

        Stock is reduced item by item. If one reduction fails the checkout
        fails, but reductions already made for earlier items are kept.

        Returns:
            Result whose value is the created Order
        """
        cart = self.cart_db.get_cart(cart_id)
        if not cart:
            return OperationResult.failure(FailureReason.CART_NOT_FOUND, "Cart not found")

        errors = cart.validate()
        if errors:
            logger.info(f"Checkout of cart {cart_id} rejected: {'; '.join(errors)}")
            return OperationResult.failure(
                FailureReason.VALIDATION_FAILED,
                "Cart is not ready for checkout",
                errors=errors,
            )

        for item in cart.items:
            result = self.product_db.reduce_stock(item.product.id, item.quantity)
            if not result:
                logger.error(
                    f"Stock commit failed for {item.product.id} in cart {cart_id}: {result.message}"
                )
                return OperationResult.failure(
                    FailureReason.STOCK_COMMIT_FAILED,
                    f"Could not reserve stock for {item.product.name}: {result.message}",
                    errors=[result.message] if result.message else [],
                )

        order = self._build_order(cart)

        # Coupon uses were counted when they were applied, so they are not reverted here
        cart.clear()
        self.cart_db.save()

        self.order_db.add_order(order)

        logger.info(
            f"Order {order.order_id} created for cart {cart_id}: "
            f"R$ {order.summary.total:.2f} ({len(order.items)} items)"
        )
        return OperationResult.success(order, message="Order placed")

    def _build_order(self, cart: ShoppingCart) -> Order:
        summary = cart.financial_summary()

        items = tuple(
            OrderItem(
                product_id=item.product.id,
                product_name=item.product.name,
                category=item.product.category,
                product=item.product.model_dump(mode="json"),
                quantity=item.quantity,
                unit_price=item.product.price,
                final_unit_price=item.product.final_price,
                subtotal=item.subtotal,
                original_subtotal=item.original_subtotal,
                total_discount=item.total_discount,
            )
            for item in cart.items
        )

        coupons = tuple(
            AppliedCouponSnapshot(
                code=coupon.code,
                type=coupon.type.value,
                value=coupon.value,
                discount=coupon.calculate_discount(summary.subtotal, held=True),
                description=coupon.description,
            )
            for coupon in cart.applied_coupons
        )

        return Order(
            order_id=f"ORD-{uuid.uuid4().hex[:8].upper()}",
            cart_id=cart.id,
            user_id=cart.user_id,
            items=items,
            summary=summary,
            shipping_address=cart.shipping_address,
            applied_coupons=coupons,
            processed_at=datetime.utcnow(),
        )
