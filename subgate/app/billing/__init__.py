"""Billing provider records, client seam, and provider errors."""

from .exceptions import ConfigurationError, EntitlementError, ProviderFetchError
from .models import (
    Customer,
    PortalConfiguration,
    PortalProduct,
    Price,
    PriceRef,
    Product,
    Subscription,
    SubscriptionItem,
)
from .provider import BillingProviderClient

__all__ = [
    "BillingProviderClient",
    "ConfigurationError",
    "Customer",
    "EntitlementError",
    "PortalConfiguration",
    "PortalProduct",
    "Price",
    "PriceRef",
    "Product",
    "ProviderFetchError",
    "Subscription",
    "SubscriptionItem",
]
