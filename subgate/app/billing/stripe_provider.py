"""Stripe-backed implementation of :class:`BillingProviderClient`."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional

import stripe

from .exceptions import ProviderFetchError
from .models import Customer, PortalConfiguration, PriceRef

logger = logging.getLogger("billing.stripe")

_PORTAL_PRODUCTS_EXPANSION = "data.features.subscription_update.products"


def _to_payload(stripe_object: Any) -> Dict[str, Any]:
    # StripeObject renders itself as JSON; this flattens nested objects too.
    return json.loads(str(stripe_object))


class StripeBillingClient:
    """Talks to Stripe with an explicit API key passed on every request.

    No module-level ``stripe.api_key`` is set, so several clients (or tests)
    can coexist in one process. The Stripe SDK is blocking; calls are moved
    to worker threads so the resolver's event loop keeps running.
    """

    def __init__(self, api_key: str, *, api_version: Optional[str] = None) -> None:
        if not api_key:
            raise ValueError("api_key must be provided")
        self._request_options: Dict[str, Any] = {"api_key": api_key}
        if api_version:
            self._request_options["stripe_version"] = api_version

    async def _call(self, operation: str, func: Callable[..., Any], *args: Any, **params: Any) -> Dict[str, Any]:
        try:
            result = await asyncio.to_thread(func, *args, **params, **self._request_options)
        except stripe.StripeError as exc:
            logger.warning("Stripe %s failed: %s", operation, exc.user_message or exc)
            raise ProviderFetchError(f"Stripe {operation} failed", operation=operation) from exc
        return _to_payload(result)

    async def list_default_portal_configurations(self) -> List[PortalConfiguration]:
        payload = await self._call(
            "list_portal_configurations",
            stripe.billing_portal.Configuration.list,
            is_default=True,
            expand=[_PORTAL_PRODUCTS_EXPANSION],
        )
        return [PortalConfiguration.model_validate(item) for item in payload.get("data", [])]

    async def retrieve_price(self, ref: PriceRef, *, expand_product: bool = True) -> Dict[str, Any]:
        expand = ["product"] if expand_product else []
        return await self._call("retrieve_price", stripe.Price.retrieve, ref, expand=expand)

    async def retrieve_customer(self, customer_id: str, *, expand_subscriptions: bool = True) -> Customer:
        expand = ["subscriptions"] if expand_subscriptions else []
        payload = await self._call("retrieve_customer", stripe.Customer.retrieve, customer_id, expand=expand)
        return Customer.model_validate(payload)

    async def create_checkout_session(
        self,
        *,
        customer_id: str,
        price: PriceRef,
        success_url: str,
        cancel_url: str,
        quantity: int = 1,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        return await self._call(
            "create_checkout_session",
            stripe.checkout.Session.create,
            customer=customer_id,
            success_url=success_url,
            cancel_url=cancel_url,
            line_items=[{"price": price, "quantity": quantity}],
            mode="subscription",
            metadata=metadata or {},
        )

    async def create_portal_session(self, *, customer_id: str, return_url: str) -> Dict[str, Any]:
        return await self._call(
            "create_portal_session",
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=return_url,
        )


__all__ = ["StripeBillingClient"]
