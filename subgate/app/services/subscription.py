"""Application wiring for the entitlement service."""
from __future__ import annotations

import logging
from functools import lru_cache

from ...config import load_config
from ..billing.exceptions import ConfigurationError
from ..billing.stripe_provider import StripeBillingClient
from ..entitlements import EntitlementService

logger = logging.getLogger("entitlements")


@lru_cache(maxsize=1)
def get_entitlement_service() -> EntitlementService:
    config = load_config()
    if not config.stripe_secret_key:
        logger.error("STRIPE_SECRET_KEY is not set; subscription actions are unavailable")
        raise ConfigurationError("STRIPE_SECRET_KEY is not set")
    client = StripeBillingClient(config.stripe_secret_key, api_version=config.stripe_api_version)
    if config.entitled_statuses:
        logger.info("Subscriptions entitle only with status in %s", sorted(config.entitled_statuses))
    return EntitlementService(
        client,
        entitled_statuses=config.entitled_statuses,
        return_url=config.app_base_url,
    )


__all__ = ["get_entitlement_service"]
