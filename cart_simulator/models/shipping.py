"""Shipping models for the cart simulator"""

import re
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Placeholder CEPs made of one repeated digit are rejected
PLACEHOLDER_POSTAL_CODES = frozenset(str(digit) * 8 for digit in range(10))


def clean_postal_code(postal_code: str) -> str:
    """Strip everything but digits from a CEP"""
    return re.sub(r"\D", "", postal_code or "")


def is_valid_postal_code(postal_code: Optional[str]) -> bool:
    digits = clean_postal_code(postal_code or "")
    return len(digits) == 8 and digits not in PLACEHOLDER_POSTAL_CODES


def format_postal_code(postal_code: str) -> str:
    """Format a CEP as 00000-000, leaving unrecognised input as given"""
    digits = clean_postal_code(postal_code)
    if len(digits) == 8:
        return f"{digits[:5]}-{digits[5:]}"
    return postal_code


class ShippingAddress(BaseModel):
    """Shipping address for order"""
    name: str
    street: str
    city: str
    state: str
    postal_code: str
    country: str = "BR"

    @field_validator("postal_code")
    @classmethod
    def check_postal_code(cls, value: str) -> str:
        if not is_valid_postal_code(value):
            raise ValueError("Invalid CEP. Use the format 00000-000 or 00000000")
        return format_postal_code(value)


class ShippingType(str, Enum):
    ECONOMIC = "economic"
    STANDARD = "standard"
    EXPRESS = "express"


class ShippingRate(BaseModel):
    """Flat rate for a CEP range"""
    region: str
    rate: float
    days: int


class ShippingQuote(BaseModel):
    """Cost and delivery estimate for one shipping option"""
    postal_code: str
    region: str
    type: ShippingType = ShippingType.STANDARD
    name: str = "Standard"
    cost: float
    original_cost: float
    delivery_days: int
    weight: float
    is_free_shipping: bool
    free_shipping_threshold: float
    estimated_delivery: date


class DeliveryAvailability(BaseModel):
    available: bool
    region: Optional[str] = None
    estimated_days: Optional[int] = None
    reason: Optional[str] = None


class FreeShippingInfo(BaseModel):
    """Progress of a cart toward free shipping"""
    threshold: float
    current_value: float
    remaining: float
    qualified: bool
    percentage: float


class ShippingSelectionRequest(BaseModel):
    """Request to pick a shipping option for a cart"""
    address: ShippingAddress
    type: ShippingType = ShippingType.STANDARD


class ShippingOptionsResponse(BaseModel):
    options: list[ShippingQuote]
    free_shipping: FreeShippingInfo
    weight: float = Field(ge=0)
