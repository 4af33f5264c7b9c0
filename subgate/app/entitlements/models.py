"""Read models produced by entitlement resolution."""
from __future__ import annotations

from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from ..billing.models import Price, Product, Subscription


class ExpandedPrice(BaseModel):
    """A fetched price together with the product object it was expanded with."""

    price: Price
    product: Product

    model_config = ConfigDict(frozen=True)


class CatalogEntry(BaseModel):
    """A portal product and its prices, in configuration order."""

    product: Product
    prices: List[Price] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


Catalog = List[CatalogEntry]


class SubscriptionState(BaseModel):
    """Catalog plus the customer's authoritative subscription, if any."""

    products: Catalog = Field(default_factory=list)
    subscription: Optional[Subscription] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_subscribed(self) -> bool:
        return self.subscription is not None

    def product_index(self) -> Dict[str, Product]:
        return {entry.product.id: entry.product for entry in self.products}

    def subscribed_product_ids(self) -> Set[str]:
        if self.subscription is None:
            return set()
        return set(self.subscription.product_ids)

    def features(self) -> Set[str]:
        """Union of the feature tags of every subscribed product.

        Products are looked up in the catalog; a subscribed product that the
        portal configuration does not offer contributes nothing.
        """

        index = self.product_index()
        features: Set[str] = set()
        for product_id in self.subscribed_product_ids():
            product = index.get(product_id)
            if product is not None:
                features |= product.features
        return features
