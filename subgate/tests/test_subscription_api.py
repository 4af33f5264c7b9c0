from __future__ import annotations

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from subgate.app.entitlements import EntitlementService
from subgate.app.routes import subscription as subscription_routes
from subgate.app.schemas.subscription import CheckoutRequest
from subgate.app.services.subscription import get_entitlement_service

from conftest import make_subscription

HEADERS = {"X-Customer-Id": "cus_1"}


@pytest.fixture
def client(provider):
    provider.customers["cus_1"] = {
        "id": "cus_1",
        "subscriptions": {"data": [make_subscription("sub_1", ["prod_pro"])]},
    }
    app = FastAPI()
    app.include_router(subscription_routes.router)
    app.dependency_overrides[get_entitlement_service] = lambda: EntitlementService(
        provider, return_url="https://app.test"
    )
    return TestClient(app)


def test_use_subscription_returns_read_model(client):
    response = client.get("/api/subscription", params={"action": "useSubscription"}, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert [entry["product"]["id"] for entry in body["products"]] == ["prod_basic", "prod_pro"]
    assert body["subscription"]["id"] == "sub_1"


def test_unknown_action_returns_error(client):
    response = client.get("/api/subscription", params={"action": "cancelEverything"}, headers=HEADERS)

    assert response.status_code == 400
    assert response.json() == {"error": "Action not found"}


def test_missing_customer_is_rejected(client):
    response = client.get("/api/subscription", params={"action": "useSubscription"})

    assert response.status_code == 401


def test_redirect_to_checkout_creates_session(client, provider):
    response = client.post(
        "/api/subscription",
        params={"action": "redirectToCheckout"},
        json={"price": "price_basic_year"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["url"] == "https://provider.test/checkout/cus_1"
    assert provider.checkout_sessions[0]["price"] == "price_basic_year"


def test_redirect_to_checkout_refuses_unknown_price(client, provider):
    response = client.post(
        "/api/subscription",
        params={"action": "redirectToCheckout"},
        json={"price": "price_elsewhere"},
        headers=HEADERS,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Error"}
    assert provider.checkout_sessions == []


@pytest.mark.parametrize("action", ["redirectToBillingPortal", "redirectToCustomerPortal"])
def test_redirect_to_portal(client, provider, action):
    response = client.post("/api/subscription", params={"action": action}, headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["url"] == "https://provider.test/portal/cus_1"
    assert body["expiresAt"].startswith("2023-11-14T22:13:20")
    assert provider.portal_sessions[0]["return_url"] == "https://app.test"


def test_provider_failure_surfaces_generic_error(client, provider):
    provider.failing_prices.add("price_pro_month")

    response = client.get("/api/subscription", params={"action": "useSubscription"}, headers=HEADERS)

    assert response.status_code == 502
    assert response.json() == {"error": "provider_fetch_error"}


def test_malformed_price_record_surfaces_generic_error(client, provider):
    provider.malformed_prices.add("price_basic_month")

    response = client.get("/api/subscription", params={"action": "useSubscription"}, headers=HEADERS)

    assert response.status_code == 502
    assert response.json() == {"error": "provider_fetch_error"}


def test_configuration_error_surfaces_generic_error(client, provider):
    provider.configurations = []

    response = client.get("/api/subscription", params={"action": "useSubscription"}, headers=HEADERS)

    assert response.status_code == 500
    assert response.json() == {"error": "configuration_error"}


@pytest.mark.parametrize("body", [{}, {"price": ""}, {"metadata": {"plan": "pro"}}])
def test_checkout_without_price_returns_generic_error(client, provider, body):
    response = client.post(
        "/api/subscription",
        params={"action": "redirectToCheckout"},
        json=body,
        headers=HEADERS,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Error"}
    assert provider.checkout_sessions == []


def test_route_function_can_be_called_directly(provider):
    service = EntitlementService(provider)

    body = asyncio.run(
        subscription_routes.subscription_action(
            action="useSubscription",
            payload=None,
            customer_id="cus_2",
            service=service,
        )
    )

    assert body["subscription"] is None
    assert len(body["products"]) == 2


def test_checkout_without_body_is_an_error(provider):
    response = asyncio.run(
        subscription_routes.subscription_action(
            action="redirectToCheckout",
            payload=None,
            customer_id="cus_2",
            service=EntitlementService(provider),
        )
    )

    assert response.status_code == 400
    assert provider.checkout_sessions == []


def test_checkout_request_requires_price():
    with pytest.raises(ValueError):
        CheckoutRequest(price="")
