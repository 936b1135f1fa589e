"""Coupon models for the cart simulator"""

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.result import OperationResult, FailureReason


class CouponType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CouponStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    LIMIT_REACHED = "limit_reached"


STATUS_MESSAGES = {
    CouponStatus.ACTIVE: "Coupon is valid and active",
    CouponStatus.INACTIVE: "Coupon has been deactivated",
    CouponStatus.EXPIRED: "Coupon has expired",
    CouponStatus.LIMIT_REACHED: "Coupon usage limit reached",
}

# Coupon fields an update may set back to null
CLEARABLE_FIELDS = ("expiry_date", "usage_limit")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Expiry dates are compared against naive UTC timestamps"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class Coupon(BaseModel):
    """Discount coupon, identified by its upper-cased code"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    code: str
    type: CouponType
    value: float
    minimum_amount: float = 0.0
    expiry_date: Optional[datetime] = None
    usage_limit: Optional[int] = None
    usage_count: int = 0
    description: str = ""
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("expiry_date")
    @classmethod
    def naive_utc_expiry(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.utcnow()
        return self.expiry_date is not None and now > self.expiry_date

    def is_exhausted(self, held: bool = False) -> bool:
        """
        Whether the usage limit is used up.

        With held, one of the counted uses belongs to the caller and does not
        count against it.
        """
        used = self.usage_count - 1 if held and self.usage_count > 0 else self.usage_count
        return self.usage_limit is not None and used >= self.usage_limit

    def is_valid(self, held: bool = False) -> bool:
        """Active, not expired and under its usage limit"""
        return self.is_active and not self.is_expired() and not self.is_exhausted(held)

    def calculate_discount(self, amount: float, held: bool = False) -> float:
        """
        Discount this coupon grants on amount.

        Returns 0 when the coupon is invalid or the amount is under the minimum;
        a fixed discount never exceeds the amount it discounts. Pass held when
        the caller already holds one of the counted uses.
        """
        if not self.is_valid(held) or amount < self.minimum_amount:
            return 0.0

        if self.type == CouponType.PERCENTAGE:
            return amount * self.value / 100
        if self.type == CouponType.FIXED:
            return min(self.value, amount)

        return 0.0

    def apply(self) -> OperationResult:
        """Count one use of the coupon, re-checking validity"""
        if not self.is_valid():
            return OperationResult.failure(FailureReason.COUPON_INVALID, self.status_message())

        self.usage_count += 1
        self.updated_at = datetime.utcnow()
        return OperationResult.success(self.usage_count)

    def revert(self) -> None:
        """Give back one use"""
        if self.usage_count > 0:
            self.usage_count -= 1
            self.updated_at = datetime.utcnow()

    def activate(self) -> None:
        self.is_active = True
        self.updated_at = datetime.utcnow()

    def deactivate(self) -> None:
        self.is_active = False
        self.updated_at = datetime.utcnow()

    def status(self) -> CouponStatus:
        if not self.is_active:
            return CouponStatus.INACTIVE
        if self.is_expired():
            return CouponStatus.EXPIRED
        if self.is_exhausted():
            return CouponStatus.LIMIT_REACHED
        return CouponStatus.ACTIVE

    def status_message(self) -> str:
        return STATUS_MESSAGES[self.status()]

    def display_text(self) -> str:
        if self.type == CouponType.PERCENTAGE:
            text = f"{self.code} - {self.value:g}% off"
        else:
            text = f"{self.code} - R$ {self.value:.2f} off"

        if self.minimum_amount > 0:
            text += f" (min. R$ {self.minimum_amount:.2f})"

        return text

    def validate(self) -> list[str]:
        """Return the list of problems with this coupon (empty if valid)"""
        errors = []

        if not self.code:
            errors.append("Coupon code is required")

        if self.value <= 0:
            errors.append("Discount value must be greater than zero")

        if self.type == CouponType.PERCENTAGE and self.value > 100:
            errors.append("Percentage discount cannot exceed 100%")

        if self.minimum_amount < 0:
            errors.append("Minimum amount cannot be negative")

        if self.usage_limit is not None and self.usage_limit <= 0:
            errors.append("Usage limit must be greater than zero")

        if self.usage_count < 0:
            errors.append("Usage count cannot be negative")

        return errors


class CouponCreateRequest(BaseModel):
    """Request to add a coupon"""
    code: str = Field(min_length=1)
    type: CouponType
    value: float = Field(gt=0)
    minimum_amount: float = Field(default=0.0, ge=0)
    expiry_date: Optional[datetime] = None
    usage_limit: Optional[int] = Field(default=None, gt=0)
    description: str = ""


class CouponUpdateRequest(BaseModel):
    """Request to change coupon fields"""
    type: Optional[CouponType] = None
    value: Optional[float] = None
    minimum_amount: Optional[float] = None
    expiry_date: Optional[datetime] = None
    usage_limit: Optional[int] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

    def changes(self) -> dict[str, Any]:
        """Fields sent in the request; an explicit null only clears the optional limits"""
        sent = self.model_dump(exclude_unset=True)
        return {name: value for name, value in sent.items() if value is not None or name in CLEARABLE_FIELDS}


class CouponValidationResponse(BaseModel):
    """Outcome of checking a coupon code against an amount"""
    code: str
    is_valid: bool
    error: Optional[str] = None
    discount: float = 0.0
    final_amount: Optional[float] = None


def sample_coupons(now: Optional[datetime] = None) -> list[Coupon]:
    """Demonstration coupons seeded into an empty store"""
    now = now or datetime.utcnow()
    tomorrow = now + timedelta(days=1)
    next_week = now + timedelta(days=7)

    return [
        Coupon(code="WELCOME10", type=CouponType.PERCENTAGE, value=10, minimum_amount=50,
               expiry_date=next_week, usage_limit=100, description="Welcome discount"),
        Coupon(code="SHIP20", type=CouponType.FIXED, value=20, minimum_amount=100,
               expiry_date=next_week, usage_limit=50, description="Shipping discount"),
        Coupon(code="MEGA50", type=CouponType.PERCENTAGE, value=50, minimum_amount=200,
               expiry_date=tomorrow, usage_limit=10, description="Limited mega discount"),
        Coupon(code="SAVE15", type=CouponType.FIXED, value=15,
               description="Fixed discount with no restrictions"),
        Coupon(code="FIRST10", type=CouponType.PERCENTAGE, value=10, usage_limit=1,
               description="First purchase discount"),
        Coupon(code="BLACKFRIDAY", type=CouponType.PERCENTAGE, value=30, minimum_amount=150,
               expiry_date=datetime(2024, 12, 31), usage_limit=1000, description="Black Friday 2024"),
        Coupon(code="FREESHIP25", type=CouponType.FIXED, value=25, minimum_amount=80,
               usage_limit=500, description="Free shipping over R$ 80"),
        Coupon(code="XMAS2024", type=CouponType.PERCENTAGE, value=20, minimum_amount=100,
               expiry_date=datetime(2024, 12, 25), usage_limit=200, description="Christmas promotion"),
        Coupon(code="BACK5", type=CouponType.FIXED, value=5, minimum_amount=30,
               description="Back to school discount"),
    ]
