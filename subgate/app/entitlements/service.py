"""Service resolving a customer's subscription state against the portal catalog."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Collection, Dict, Optional

from ..billing.exceptions import ProviderFetchError
from ..billing.models import PriceRef, Subscription
from ..billing.provider import BillingProviderClient
from .catalog import build_catalog, load_default_configuration
from .models import SubscriptionState

logger = logging.getLogger("entitlements")


async def load_subscription(
    client: BillingProviderClient,
    customer_id: str,
    *,
    entitled_statuses: Optional[Collection[str]] = None,
) -> Optional[Subscription]:
    """Return the customer's first subscription, or ``None``.

    Only one subscription per customer is supported; any further ones are
    ignored. Any status counts unless ``entitled_statuses`` is given.
    """

    try:
        customer = await client.retrieve_customer(customer_id, expand_subscriptions=True)
    except ProviderFetchError:
        raise
    except Exception as exc:
        raise ProviderFetchError(
            f"Failed to retrieve customer {customer_id}", operation="retrieve_customer"
        ) from exc

    subscriptions = customer.subscriptions.data
    if not subscriptions:
        return None
    if len(subscriptions) > 1:
        logger.debug(
            "Customer %s has %s subscriptions; using %s",
            customer_id,
            len(subscriptions),
            subscriptions[0].id,
        )

    subscription = subscriptions[0]
    if entitled_statuses and subscription.status not in entitled_statuses:
        logger.info(
            "Ignoring subscription %s for customer %s with status %s",
            subscription.id,
            customer_id,
            subscription.status,
        )
        return None
    return subscription


class EntitlementService:
    """Coordinates catalog and subscription resolution for one provider account."""

    def __init__(
        self,
        client: BillingProviderClient,
        *,
        entitled_statuses: Optional[Collection[str]] = None,
        return_url: str = "http://localhost:3000",
    ) -> None:
        self._client = client
        self._entitled_statuses = frozenset(entitled_statuses or ())
        self._return_url = return_url

    async def resolve(self, customer_id: str) -> SubscriptionState:
        """Fetch the catalog and the customer's subscription concurrently."""

        started = time.perf_counter()
        products, subscription = await asyncio.gather(
            build_catalog(self._client),
            load_subscription(
                self._client,
                customer_id,
                entitled_statuses=self._entitled_statuses,
            ),
        )
        logger.info(
            "Resolved subscription state for customer %s in %.1fms (products=%s subscribed=%s)",
            customer_id,
            (time.perf_counter() - started) * 1000,
            len(products),
            subscription is not None,
        )
        return SubscriptionState(products=products, subscription=subscription)

    async def is_offered(self, price: PriceRef) -> bool:
        """Return whether the default portal configuration offers ``price``."""

        configuration = await load_default_configuration(self._client)
        return any(price in product.prices for product in configuration.subscription_products)

    async def create_checkout_session(
        self,
        customer_id: str,
        price: PriceRef,
        *,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        if not await self.is_offered(price):
            raise LookupError(f"Price {price} is not offered by the default billing portal configuration")

        session = await self._client.create_checkout_session(
            customer_id=customer_id,
            price=price,
            success_url=self._return_url,
            cancel_url=self._return_url,
            metadata=metadata,
        )
        logger.info("Created checkout session %s for customer %s", session.get("id"), customer_id)
        return session

    async def create_portal_session(self, customer_id: str) -> Dict[str, Any]:
        session = await self._client.create_portal_session(
            customer_id=customer_id,
            return_url=self._return_url,
        )
        logger.info("Created billing portal session %s for customer %s", session.get("id"), customer_id)
        return session


__all__ = ["EntitlementService", "load_subscription"]
