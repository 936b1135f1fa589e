"""Coupon storage for the cart simulator"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from pydantic import ValidationError

from ..core.result import OperationResult, FailureReason
from ..models.coupon import Coupon, CouponType, sample_coupons, to_naive_utc
from .storage import JsonFileStore, StorageError

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("type", "value", "minimum_amount", "expiry_date", "usage_limit", "description", "is_active")


class CouponDatabase:
    """Coupons keyed by upper-cased code, persisted to a JSON file"""

    def __init__(self, store: JsonFileStore, seed_sample_data: bool = True):
        self.store = store
        self.seed_sample_data = seed_sample_data
        self.coupons: dict[str, Coupon] = {}

    # ==================== Persistence ====================

    def load(self) -> None:
        records = self.store.load()
        self.coupons.clear()

        if records is None:
            if self.seed_sample_data:
                self._seed()
            return

        for record in records:
            try:
                coupon = Coupon.model_validate(record)
            except ValidationError as e:
                raise StorageError(f"Invalid coupon record in {self.store.path}: {e}") from e
            self.coupons[coupon.code] = coupon

        logger.info(f"Loaded {len(self.coupons)} coupons")

    def save(self) -> None:
        self.store.save([c.model_dump(mode="json") for c in self.coupons.values()])

    def _seed(self) -> None:
        for coupon in sample_coupons():
            self.coupons[coupon.code] = coupon
        self.save()
        logger.info(f"Seeded {len(self.coupons)} sample coupons")

    # ==================== Queries ====================

    def get_coupon(self, code: str) -> Optional[Coupon]:
        """Get a coupon by code, ignoring case"""
        return self.coupons.get(code.strip().upper())

    def get_all_coupons(self) -> list[Coupon]:
        return list(self.coupons.values())

    def get_active_coupons(self) -> list[Coupon]:
        return [c for c in self.coupons.values() if c.is_valid()]

    def get_coupons_by_type(self, coupon_type: CouponType) -> list[Coupon]:
        return [c for c in self.coupons.values() if c.type == coupon_type]

    def get_expiring_coupons(self, days: int = 7) -> list[Coupon]:
        """Valid coupons whose expiry falls within the next days"""
        cutoff = datetime.utcnow() + timedelta(days=days)
        return [
            c for c in self.coupons.values()
            if c.expiry_date is not None and c.expiry_date <= cutoff and c.is_valid()
        ]

    def search_coupons(self, query: str) -> list[Coupon]:
        term = query.lower()
        return [
            c for c in self.coupons.values()
            if term in c.code.lower() or term in c.description.lower()
        ]

    def validate_coupon(self, code: str, amount: float) -> OperationResult:
        """
        Check whether a coupon can be used on amount.

        On success the result value is a dict with the coupon, the discount
        and the amount left to pay.
        """
        coupon = self.get_coupon(code)
        if not coupon:
            return OperationResult.failure(FailureReason.COUPON_NOT_FOUND, "Coupon not found")

        if not coupon.is_valid():
            return OperationResult.failure(
                FailureReason.COUPON_INVALID,
                coupon.status_message(),
                value={"coupon": coupon},
            )

        if amount < coupon.minimum_amount:
            return OperationResult.failure(
                FailureReason.MINIMUM_NOT_MET,
                f"Minimum amount of R$ {coupon.minimum_amount:.2f} not reached",
                value={"coupon": coupon},
            )

        discount = coupon.calculate_discount(amount)
        return OperationResult.success({
            "coupon": coupon,
            "discount": discount,
            "final_amount": max(0.0, amount - discount),
        })

    def get_coupon_statistics(self) -> dict[str, Any]:
        coupons = self.get_all_coupons()
        total_usage = sum(c.usage_count for c in coupons)
        most_used = sorted(coupons, key=lambda c: c.usage_count, reverse=True)[:5]

        return {
            "total": len(coupons),
            "active": sum(1 for c in coupons if c.is_valid()),
            "expired": sum(1 for c in coupons if c.is_expired()),
            "limit_reached": sum(1 for c in coupons if c.is_exhausted()),
            "total_usage": total_usage,
            "average_usage": total_usage / len(coupons) if coupons else 0,
            "by_type": {
                CouponType.PERCENTAGE.value: len(self.get_coupons_by_type(CouponType.PERCENTAGE)),
                CouponType.FIXED.value: len(self.get_coupons_by_type(CouponType.FIXED)),
            },
            "most_used": [c.code for c in most_used],
        }

    # ==================== Mutations ====================

    def apply_coupon(self, code: str) -> OperationResult:
        """Count one use of a coupon"""
        coupon = self.get_coupon(code)
        if not coupon:
            return OperationResult.failure(FailureReason.COUPON_NOT_FOUND, "Coupon not found")

        result = coupon.apply()
        if result:
            self.save()
        return result

    def revert_coupon(self, code: str) -> OperationResult:
        """Give back one use of a coupon"""
        coupon = self.get_coupon(code)
        if not coupon:
            return OperationResult.failure(FailureReason.COUPON_NOT_FOUND, "Coupon not found")

        coupon.revert()
        self.save()
        return OperationResult.success(coupon.usage_count)

    def add_coupon(self, coupon: Coupon) -> OperationResult:
        errors = coupon.validate()
        if errors:
            return OperationResult.failure(
                FailureReason.VALIDATION_FAILED,
                f"Invalid coupon: {', '.join(errors)}",
                errors=errors,
            )

        if coupon.code in self.coupons:
            return OperationResult.failure(
                FailureReason.DUPLICATE_CODE,
                f"Coupon code {coupon.code} already exists",
            )

        self.coupons[coupon.code] = coupon
        self.save()
        logger.info(f"Added coupon {coupon.code}")
        return OperationResult.success(coupon)

    def update_coupon(self, code: str, **changes) -> OperationResult:
        """Apply changes to a coupon, undoing them if the result is invalid"""
        coupon = self.get_coupon(code)
        if not coupon:
            return OperationResult.failure(FailureReason.COUPON_NOT_FOUND, "Coupon not found")

        if "expiry_date" in changes:
            changes["expiry_date"] = to_naive_utc(changes["expiry_date"])

        previous = {name: getattr(coupon, name) for name in UPDATABLE_FIELDS}
        for name in UPDATABLE_FIELDS:
            if name in changes:
                setattr(coupon, name, changes[name])

        errors = coupon.validate()
        if errors:
            for name, value in previous.items():
                setattr(coupon, name, value)
            return OperationResult.failure(
                FailureReason.VALIDATION_FAILED,
                f"Invalid coupon: {', '.join(errors)}",
                errors=errors,
            )

        coupon.updated_at = datetime.utcnow()
        self.save()
        return OperationResult.success(coupon)

    def remove_coupon(self, code: str) -> bool:
        code = code.strip().upper()
        if code not in self.coupons:
            return False

        del self.coupons[code]
        self.save()
        logger.info(f"Removed coupon {code}")
        return True

    def activate_coupon(self, code: str) -> bool:
        coupon = self.get_coupon(code)
        if not coupon:
            return False

        coupon.activate()
        self.save()
        return True

    def deactivate_coupon(self, code: str) -> bool:
        coupon = self.get_coupon(code)
        if not coupon:
            return False

        coupon.deactivate()
        self.save()
        return True
