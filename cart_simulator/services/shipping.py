"""
Shipping Estimator

Flat-rate shipping quotes for Brazilian postal codes (CEP), with a
per-kilogram surcharge, a free-shipping threshold and economic/express
variants of the standard option.
"""

import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from ..core.config import Settings
from ..core.result import OperationResult, FailureReason
from ..models.cart import CartItem
from ..models.shipping import (
    ShippingRate,
    ShippingQuote,
    ShippingType,
    DeliveryAvailability,
    FreeShippingInfo,
    clean_postal_code,
    format_postal_code,
    is_valid_postal_code,
)

logger = logging.getLogger(__name__)


# (first CEP prefix, last CEP prefix) -> rate; checked in order, first match wins
SHIPPING_RATES: list[tuple[tuple[int, int], ShippingRate]] = [
    ((1000, 19999), ShippingRate(region="São Paulo", rate=15.90, days=2)),
    ((20000, 28999), ShippingRate(region="Rio de Janeiro", rate=18.90, days=3)),
    ((30000, 39999), ShippingRate(region="Belo Horizonte", rate=22.90, days=4)),
    ((40000, 48999), ShippingRate(region="Salvador", rate=28.90, days=5)),
    ((50000, 56999), ShippingRate(region="Recife", rate=32.90, days=6)),
    ((60000, 63999), ShippingRate(region="Fortaleza", rate=35.90, days=7)),
    ((70000, 72999), ShippingRate(region="Brasília", rate=25.90, days=4)),
    ((80000, 87999), ShippingRate(region="Curitiba", rate=20.90, days=3)),
    ((90000, 99999), ShippingRate(region="Porto Alegre", rate=24.90, days=4)),
    ((65000, 65999), ShippingRate(region="Palmas", rate=38.90, days=8)),
    ((78000, 78899), ShippingRate(region="Cuiabá", rate=42.90, days=8)),
    ((69000, 69920), ShippingRate(region="Manaus", rate=55.90, days=10)),
    ((68000, 68914), ShippingRate(region="Santarém", rate=48.90, days=9)),
]

DEFAULT_RATE = ShippingRate(region="Other locations", rate=35.90, days=7)

# CEP prefixes with no delivery service
RESTRICTED_RANGES: list[tuple[int, int]] = [
    (69000, 69099),
]

CATEGORY_WEIGHTS = {
    "Electronics": 0.8,
    "Clothing": 0.3,
    "Footwear": 0.6,
    "Home": 1.2,
    "Decoration": 0.5,
    "Appliances": 2.5,
    "Beauty": 0.2,
    "Fragrances": 0.3,
    "Personal Care": 0.25,
    "Books": 0.4,
    "Stationery": 0.1,
    "Sports": 1.0,
    "Fitness": 0.8,
    "Accessories": 0.2,
}

SHIPPING_NAMES = {
    ShippingType.ECONOMIC: "Economic",
    ShippingType.STANDARD: "Standard",
    ShippingType.EXPRESS: "Express",
}


def _cep_prefix(postal_code: str) -> int:
    return int(clean_postal_code(postal_code)[:5])


class ShippingService:
    """Shipping quotes driven by the shipping knobs in Settings"""

    def __init__(self, settings: Settings):
        self.settings = settings

    # ==================== Postal codes ====================

    def validate_postal_code(self, postal_code: str) -> bool:
        return is_valid_postal_code(postal_code)

    def format_postal_code(self, postal_code: str) -> str:
        return format_postal_code(postal_code)

    def find_shipping_rate(self, postal_code: str) -> ShippingRate:
        """Rate for the CEP range the code falls in, or the default rate"""
        prefix = _cep_prefix(postal_code)
        for (start, end), rate in SHIPPING_RATES:
            if start <= prefix <= end:
                return rate
        return DEFAULT_RATE

    # ==================== Quotes ====================

    def calculate_delivery_date(self, business_days: int, start: Optional[date] = None) -> date:
        """Count business days forward from start, skipping weekends"""
        current = start or date.today()
        remaining = business_days
        while remaining > 0:
            current += timedelta(days=1)
            if current.weekday() < 5:
                remaining -= 1
        return current

    def calculate_shipping(
        self,
        postal_code: str,
        weight: float = 1.0,
        value: float = 0.0,
        start: Optional[date] = None,
    ) -> OperationResult:
        """
        Quote standard shipping to a CEP.

        Args:
            postal_code: Destination CEP, with or without the dash
            weight: Parcel weight in kg
            value: Order value, used for the free-shipping threshold
            start: Day the delivery estimate counts from (today by default)

        Returns:
            Result whose value is a ShippingQuote
        """
        if not self.validate_postal_code(postal_code):
            return OperationResult.failure(
                FailureReason.INVALID_POSTAL_CODE,
                "Invalid CEP. Use the format 00000-000 or 00000000",
            )

        rate = self.find_shipping_rate(postal_code)

        cost = rate.rate
        if weight > self.settings.base_weight_kg:
            cost += (weight - self.settings.base_weight_kg) * self.settings.additional_weight_rate

        is_free = value >= self.settings.free_shipping_threshold

        quote = ShippingQuote(
            postal_code=self.format_postal_code(postal_code),
            region=rate.region,
            type=ShippingType.STANDARD,
            name=SHIPPING_NAMES[ShippingType.STANDARD],
            cost=0.0 if is_free else round(cost, 2),
            original_cost=rate.rate,
            delivery_days=rate.days,
            weight=weight,
            is_free_shipping=is_free,
            free_shipping_threshold=self.settings.free_shipping_threshold,
            estimated_delivery=self.calculate_delivery_date(rate.days, start),
        )
        return OperationResult.success(quote)

    def get_shipping_options(
        self,
        postal_code: str,
        weight: float = 1.0,
        value: float = 0.0,
        start: Optional[date] = None,
    ) -> OperationResult:
        """Economic, standard and express quotes, cheapest first"""
        result = self.calculate_shipping(postal_code, weight, value, start)
        if not result:
            return result

        standard: ShippingQuote = result.value

        if standard.is_free_shipping:
            economic_cost = 0.0
            express_cost = self.settings.express_surcharge
        else:
            economic_cost = max(self.settings.economic_minimum, standard.cost - self.settings.economic_discount)
            express_cost = standard.cost + self.settings.express_surcharge

        economic_days = standard.delivery_days + self.settings.economic_extra_days
        express_days = max(1, standard.delivery_days - self.settings.express_days_saved)

        economic = standard.model_copy(update={
            "type": ShippingType.ECONOMIC,
            "name": SHIPPING_NAMES[ShippingType.ECONOMIC],
            "cost": round(economic_cost, 2),
            "delivery_days": economic_days,
            "estimated_delivery": self.calculate_delivery_date(economic_days, start),
        })
        express = standard.model_copy(update={
            "type": ShippingType.EXPRESS,
            "name": SHIPPING_NAMES[ShippingType.EXPRESS],
            "cost": round(express_cost, 2),
            "delivery_days": express_days,
            "estimated_delivery": self.calculate_delivery_date(express_days, start),
        })

        return OperationResult.success([economic, standard, express])

    def get_quote(
        self,
        postal_code: str,
        shipping_type: ShippingType = ShippingType.STANDARD,
        weight: float = 1.0,
        value: float = 0.0,
    ) -> OperationResult:
        """Quote a single shipping option"""
        result = self.get_shipping_options(postal_code, weight, value)
        if not result:
            return result

        quote = next(q for q in result.value if q.type == shipping_type)
        return OperationResult.success(quote)

    # ==================== Cart helpers ====================

    def calculate_weight(self, items: Iterable[CartItem]) -> float:
        """Parcel weight from per-category item weights"""
        total = 0.0
        for item in items:
            unit_weight = CATEGORY_WEIGHTS.get(item.product.category, self.settings.default_item_weight)
            total += unit_weight * item.quantity
        return max(total, self.settings.minimum_weight)

    def check_delivery_availability(self, postal_code: str) -> DeliveryAvailability:
        if not self.validate_postal_code(postal_code):
            return DeliveryAvailability(available=False, reason="Invalid CEP")

        prefix = _cep_prefix(postal_code)
        for start, end in RESTRICTED_RANGES:
            if start <= prefix <= end:
                logger.info(f"Delivery requested to restricted CEP {self.format_postal_code(postal_code)}")
                return DeliveryAvailability(available=False, reason="Region with restricted delivery")

        rate = self.find_shipping_rate(postal_code)
        return DeliveryAvailability(available=True, region=rate.region, estimated_days=rate.days)

    def get_free_shipping_info(self, cart_value: float) -> FreeShippingInfo:
        """How far a cart value is from the free-shipping threshold"""
        threshold = self.settings.free_shipping_threshold
        remaining = max(0.0, threshold - cart_value)
        percentage = min(100.0, cart_value / threshold * 100) if threshold > 0 else 100.0

        return FreeShippingInfo(
            threshold=threshold,
            current_value=cart_value,
            remaining=remaining,
            qualified=remaining == 0,
            percentage=percentage,
        )
