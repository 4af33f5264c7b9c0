"""Billing provider client seam consumed by entitlement resolution."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from .models import Customer, PortalConfiguration, PriceRef


class BillingProviderClient(Protocol):
    """External billing provider integration.

    Implementations must tolerate concurrent calls on one instance; the
    resolver issues many ``retrieve_price`` calls at once.
    """

    async def list_default_portal_configurations(self) -> List[PortalConfiguration]:
        """Return every portal configuration flagged as default."""

    async def retrieve_price(self, ref: PriceRef, *, expand_product: bool = True) -> Dict[str, Any]:
        """Return the raw price payload, with ``product`` expanded when requested."""

    async def retrieve_customer(self, customer_id: str, *, expand_subscriptions: bool = True) -> Customer:
        """Return the customer with its subscriptions expanded."""

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
        """Create a hosted subscription checkout session."""

    async def create_portal_session(self, *, customer_id: str, return_url: str) -> Dict[str, Any]:
        """Create a self-service billing portal session."""
