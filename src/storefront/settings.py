"""Runtime settings read from the environment.

Protean infrastructure (databases, brokers, event store) is configured in
``domain.toml``; everything the storefront itself needs to know about money,
the payment gateway and its policies lives here.
"""

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    environment: str
    gateway: str
    razorpay_key_id: str
    razorpay_key_secret: str
    razorpay_webhook_secret: str
    razorpay_api_url: str
    currency: str
    free_shipping_threshold: float
    flat_shipping_fee: float
    tax_rate: float
    return_window_days: int
    order_number_prefix: str

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings from environment variables (cached)."""
    key_secret = os.environ.get("RAZORPAY_KEY_SECRET", "storefront_test_secret")
    return Settings(
        environment=os.environ.get("PROTEAN_ENV", "development").lower(),
        gateway=os.environ.get("PAYMENT_GATEWAY", "fake").lower(),
        razorpay_key_id=os.environ.get("RAZORPAY_KEY_ID", "rzp_test_storefront"),
        razorpay_key_secret=key_secret,
        # Razorpay lets merchants set a separate webhook secret; fall back to the key secret.
        razorpay_webhook_secret=os.environ.get("RAZORPAY_WEBHOOK_SECRET", key_secret),
        razorpay_api_url=os.environ.get("RAZORPAY_API_URL", "https://api.razorpay.com/v1"),
        currency=os.environ.get("PAYMENT_CURRENCY", "INR"),
        free_shipping_threshold=float(os.environ.get("FREE_SHIPPING_THRESHOLD", "999")),
        flat_shipping_fee=float(os.environ.get("FLAT_SHIPPING_FEE", "50")),
        tax_rate=float(os.environ.get("TAX_RATE", "0")),
        return_window_days=int(os.environ.get("RETURN_WINDOW_DAYS", "30")),
        order_number_prefix=os.environ.get("ORDER_NUMBER_PREFIX", "ORD"),
    )


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
