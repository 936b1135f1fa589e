"""Cart Simulator Configuration"""

from pathlib import Path
from typing import Optional
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Cart Simulator"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8001
    default_user_id: str = "user-default"

    # Storage
    data_dir: str = "data"
    seed_sample_data: bool = True

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Catalog
    product_max_name_length: int = 100
    top_rated_min_rating: float = 4.0

    # Shipping
    free_shipping_threshold: float = 150.0
    base_weight_kg: float = 1.0
    additional_weight_rate: float = 3.50  # per kg above the base weight
    express_surcharge: float = 15.90
    express_days_saved: int = 2
    economic_discount: float = 5.00
    economic_minimum: float = 8.90
    economic_extra_days: int = 3
    default_item_weight: float = 0.5
    minimum_weight: float = 0.1

    # Carts and coupons
    abandoned_cart_days: int = 7
    expiring_coupon_days: int = 7

    class Config:
        env_prefix = "CART_SIM_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def data_path(self) -> Path:
        """Directory holding the JSON collections"""
        return Path(self.data_dir)

    def collection_path(self, collection: str) -> Path:
        """Get the JSON file backing a collection"""
        return self.data_path / f"{collection}.json"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
