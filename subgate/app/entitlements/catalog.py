"""Catalog reconstruction from the default billing portal configuration."""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, cast

from pydantic import ValidationError

from ..billing.exceptions import ConfigurationError, ProviderFetchError
from ..billing.models import PortalConfiguration, PortalProduct, Price, PriceRef, Product
from ..billing.provider import BillingProviderClient
from .models import Catalog, CatalogEntry, ExpandedPrice

logger = logging.getLogger("entitlements")


def select_default_configuration(configurations: Sequence[PortalConfiguration]) -> PortalConfiguration:
    """Return the single default portal configuration.

    Zero or several defaults mean the provider account is misconfigured; we
    refuse to guess which one the portal would use.
    """

    if len(configurations) != 1:
        raise ConfigurationError(
            f"Expected exactly one default billing portal configuration, found {len(configurations)}"
        )
    return configurations[0]


async def _fetch_price(client: BillingProviderClient, ref: PriceRef) -> ExpandedPrice:
    try:
        payload = await client.retrieve_price(ref, expand_product=True)
    except ProviderFetchError:
        raise
    except Exception as exc:
        raise ProviderFetchError(f"Failed to retrieve price {ref}", operation="retrieve_price") from exc

    raw_product = payload.get("product")
    if not isinstance(raw_product, dict):
        raise ProviderFetchError(f"Price {ref} was returned without its product expanded", operation="retrieve_price")
    try:
        return ExpandedPrice(price=Price.model_validate(payload), product=Product.model_validate(raw_product))
    except ValidationError as exc:
        raise ProviderFetchError(f"Malformed price record for {ref}", operation="retrieve_price") from exc


async def expand_prices(
    client: BillingProviderClient,
    price_refs: Sequence[Sequence[PriceRef]],
) -> List[List[ExpandedPrice]]:
    """Fetch every ``price_refs[i][j]`` concurrently into slot ``[i][j]``.

    Slots are sized before any fetch is dispatched and each one is written by
    exactly one task, so completion order never moves a price. A single
    failed fetch fails the whole expansion.
    """

    slots: List[List[Optional[ExpandedPrice]]] = [[None] * len(refs) for refs in price_refs]

    async def fill(i: int, j: int, ref: PriceRef) -> None:
        slots[i][j] = await _fetch_price(client, ref)

    await asyncio.gather(
        *(fill(i, j, ref) for i, refs in enumerate(price_refs) for j, ref in enumerate(refs))
    )
    # gather only returns once every task has written its slot.
    return cast(List[List[ExpandedPrice]], slots)


def assemble_catalog(
    portal_products: Sequence[PortalProduct],
    expanded: Sequence[Sequence[ExpandedPrice]],
) -> Catalog:
    """Zip portal products with their expanded prices into catalog entries."""

    if len(portal_products) != len(expanded):
        raise ValueError("expanded prices do not line up with portal products")

    catalog: Catalog = []
    for portal_product, prices in zip(portal_products, expanded):
        if len(prices) != len(portal_product.prices):
            raise ValueError(f"incomplete price expansion for product {portal_product.product}")
        if not prices:
            raise ConfigurationError(f"Portal product {portal_product.product} offers no prices")
        catalog.append(
            CatalogEntry(
                product=prices[0].product,
                prices=[item.price for item in prices],
            )
        )
    return catalog


async def load_default_configuration(client: BillingProviderClient) -> PortalConfiguration:
    """List default portal configurations and return the only one."""

    try:
        configurations = await client.list_default_portal_configurations()
    except ProviderFetchError:
        raise
    except Exception as exc:
        raise ProviderFetchError(
            "Failed to list billing portal configurations", operation="list_portal_configurations"
        ) from exc
    return select_default_configuration(configurations)


async def build_catalog(client: BillingProviderClient) -> Catalog:
    """Fetch the default portal configuration and expand it into a catalog."""

    configuration = await load_default_configuration(client)
    portal_products = configuration.subscription_products
    expanded = await expand_prices(client, [product.prices for product in portal_products])
    catalog = assemble_catalog(portal_products, expanded)
    logger.debug(
        "Built catalog from configuration %s: %s products, %s prices",
        configuration.id,
        len(catalog),
        sum(len(entry.prices) for entry in catalog),
    )
    return catalog


__all__ = [
    "assemble_catalog",
    "build_catalog",
    "expand_prices",
    "load_default_configuration",
    "select_default_configuration",
]
