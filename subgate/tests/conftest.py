from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Set

import pytest

from subgate.app.billing import Customer, PortalConfiguration, ProviderFetchError


def make_product(product_id: str, features: Optional[str] = None) -> Dict[str, Any]:
    metadata = {"features": features} if features is not None else {}
    return {"id": product_id, "object": "product", "name": product_id.title(), "metadata": metadata}


def make_configuration(config_id: str, products: List[tuple[str, List[str]]]) -> Dict[str, Any]:
    return {
        "id": config_id,
        "object": "billing_portal.configuration",
        "is_default": True,
        "features": {
            "subscription_update": {
                "enabled": True,
                "products": [{"product": product, "prices": prices} for product, prices in products],
            }
        },
    }


def make_subscription(subscription_id: str, product_ids: List[str], status: str = "active") -> Dict[str, Any]:
    return {
        "id": subscription_id,
        "object": "subscription",
        "status": status,
        "items": {
            "object": "list",
            "data": [
                {"id": f"si_{index}", "price": {"id": f"price_{product_id}", "product": product_id}}
                for index, product_id in enumerate(product_ids)
            ],
        },
    }


class FakeBillingProvider:
    """In-memory provider; ``delays`` reorders completion of price fetches."""

    def __init__(self) -> None:
        self.configurations: List[Dict[str, Any]] = []
        self.products: Dict[str, Dict[str, Any]] = {}
        self.prices: Dict[str, str] = {}
        self.customers: Dict[str, Dict[str, Any]] = {}
        self.delays: Dict[str, float] = {}
        self.failing_prices: Set[str] = set()
        self.malformed_prices: Set[str] = set()
        self.fail_customer = False
        self.fail_configurations = False
        self.price_calls: List[str] = []
        self.customer_calls: List[str] = []
        self.checkout_sessions: List[Dict[str, Any]] = []
        self.portal_sessions: List[Dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def add_product(self, product_id: str, price_ids: List[str], features: Optional[str] = None) -> None:
        self.products[product_id] = make_product(product_id, features)
        for price_id in price_ids:
            self.prices[price_id] = product_id

    async def _enter(self, delay: float = 0.0) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(delay)
        finally:
            self.in_flight -= 1

    async def list_default_portal_configurations(self) -> List[PortalConfiguration]:
        await self._enter()
        if self.fail_configurations:
            raise ProviderFetchError("configuration listing failed", operation="list_portal_configurations")
        return [PortalConfiguration.model_validate(config) for config in self.configurations]

    async def retrieve_price(self, ref: str, *, expand_product: bool = True) -> Dict[str, Any]:
        self.price_calls.append(ref)
        await self._enter(self.delays.get(ref, 0.0))
        if ref in self.failing_prices:
            raise RuntimeError(f"no such price: {ref}")
        product_id = self.prices[ref]
        product: Any = dict(self.products[product_id]) if expand_product else product_id
        payload = {"id": ref, "object": "price", "currency": "usd", "unit_amount": 1000, "product": product}
        if ref in self.malformed_prices:
            del payload["id"]
        return payload

    async def retrieve_customer(self, customer_id: str, *, expand_subscriptions: bool = True) -> Customer:
        self.customer_calls.append(customer_id)
        await self._enter(self.delays.get(customer_id, 0.0))
        if self.fail_customer:
            raise RuntimeError("customer lookup failed")
        payload = self.customers.get(customer_id, {"id": customer_id, "subscriptions": {"data": []}})
        return Customer.model_validate(payload)

    async def create_checkout_session(
        self,
        *,
        customer_id: str,
        price: str,
        success_url: str,
        cancel_url: str,
        quantity: int = 1,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        session = {
            "id": f"cs_{len(self.checkout_sessions) + 1}",
            "url": f"https://provider.test/checkout/{customer_id}",
            "customer": customer_id,
            "price": price,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata or {},
        }
        self.checkout_sessions.append(session)
        return session

    async def create_portal_session(self, *, customer_id: str, return_url: str) -> Dict[str, Any]:
        session = {
            "id": f"bps_{len(self.portal_sessions) + 1}",
            "url": f"https://provider.test/portal/{customer_id}",
            "return_url": return_url,
            "expires_at": 1700000000,
        }
        self.portal_sessions.append(session)
        return session


@pytest.fixture
def provider() -> FakeBillingProvider:
    """Two products, three prices, one default configuration."""

    fake = FakeBillingProvider()
    fake.add_product("prod_basic", ["price_basic_month", "price_basic_year"], features="reports,export")
    fake.add_product("prod_pro", ["price_pro_month"], features="export, api ,sso")
    fake.configurations.append(
        make_configuration(
            "bpc_default",
            [
                ("prod_basic", ["price_basic_month", "price_basic_year"]),
                ("prod_pro", ["price_pro_month"]),
            ],
        )
    )
    return fake
