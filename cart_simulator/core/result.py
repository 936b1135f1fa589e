"""Operation result types shared by models, stores and services"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class FailureReason(str, Enum):
    """Why an operation was refused"""
    # Business-rule rejections
    INVALID_QUANTITY = "invalid_quantity"
    INSUFFICIENT_STOCK = "insufficient_stock"
    PRODUCT_MISMATCH = "product_mismatch"
    INVALID_ITEM = "invalid_item"
    ITEM_NOT_IN_CART = "item_not_in_cart"
    COUPON_INVALID = "coupon_invalid"
    COUPON_ALREADY_APPLIED = "coupon_already_applied"
    COUPON_NOT_APPLIED = "coupon_not_applied"
    MINIMUM_NOT_MET = "minimum_not_met"
    DUPLICATE_CODE = "duplicate_code"
    VALIDATION_FAILED = "validation_failed"
    INVALID_POSTAL_CODE = "invalid_postal_code"
    DELIVERY_UNAVAILABLE = "delivery_unavailable"
    STOCK_COMMIT_FAILED = "stock_commit_failed"

    # Not-found conditions
    CART_NOT_FOUND = "cart_not_found"
    PRODUCT_NOT_FOUND = "product_not_found"
    COUPON_NOT_FOUND = "coupon_not_found"
    ORDER_NOT_FOUND = "order_not_found"


NOT_FOUND_REASONS = frozenset({
    FailureReason.CART_NOT_FOUND,
    FailureReason.PRODUCT_NOT_FOUND,
    FailureReason.COUPON_NOT_FOUND,
    FailureReason.ORDER_NOT_FOUND,
})


@dataclass
class OperationResult:
    """
    Outcome of a cart, catalog or coupon operation.

    Expected failures are reported here instead of being raised, so the caller
    can retry with different input. A result is truthy only on success.
    """
    ok: bool
    value: Any = None
    reason: Optional[FailureReason] = None
    message: Optional[str] = None
    errors: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.ok

    @property
    def is_not_found(self) -> bool:
        return self.reason in NOT_FOUND_REASONS

    @classmethod
    def success(cls, value: Any = None, message: Optional[str] = None) -> "OperationResult":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(
        cls,
        reason: FailureReason,
        message: str,
        errors: Optional[list[str]] = None,
        value: Any = None,
    ) -> "OperationResult":
        return cls(
            ok=False,
            value=value,
            reason=reason,
            message=message,
            errors=list(errors or []),
        )
