# Services

from .shipping import ShippingService
from .checkout import CheckoutService

__all__ = ["ShippingService", "CheckoutService"]
