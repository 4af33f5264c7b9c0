"""Provider-side billing records as returned by the billing API."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PriceRef = str


def _bare_product_id(value: Any) -> Any:
    # Expanded product objects collapse back to their identifier.
    if isinstance(value, dict):
        return value.get("id")
    identifier = getattr(value, "id", None)
    if identifier is not None and not isinstance(value, str):
        return identifier
    return value


class Product(BaseModel):
    """Billing provider product with free-form string metadata."""

    id: str
    metadata: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow", frozen=True)

    @field_validator("metadata", mode="before")
    @classmethod
    def _stringify_metadata(cls, value: object) -> Dict[str, str]:
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return {}

    @property
    def features(self) -> frozenset[str]:
        """Feature names listed in ``metadata.features``."""

        raw = self.metadata.get("features", "")
        return frozenset(name.strip() for name in raw.split(",") if name.strip())


class Price(BaseModel):
    """Price record whose ``product`` always holds the bare product id."""

    id: str
    product: str

    model_config = ConfigDict(extra="allow", frozen=True)

    @field_validator("product", mode="before")
    @classmethod
    def _normalize_product(cls, value: object) -> object:
        return _bare_product_id(value)


class PortalProduct(BaseModel):
    """One product offered for subscription updates by a portal configuration."""

    product: str
    prices: List[PriceRef] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", frozen=True)

    @field_validator("product", mode="before")
    @classmethod
    def _normalize_product(cls, value: object) -> object:
        return _bare_product_id(value)


class SubscriptionUpdateFeature(BaseModel):
    products: List[PortalProduct] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", frozen=True)


class PortalFeatures(BaseModel):
    subscription_update: SubscriptionUpdateFeature = Field(default_factory=SubscriptionUpdateFeature)

    model_config = ConfigDict(extra="allow", frozen=True)


class PortalConfiguration(BaseModel):
    """Billing portal configuration listing the products customers may switch to."""

    id: str
    is_default: bool = False
    features: PortalFeatures = Field(default_factory=PortalFeatures)

    model_config = ConfigDict(extra="allow", frozen=True)

    @property
    def subscription_products(self) -> List[PortalProduct]:
        return list(self.features.subscription_update.products)


class SubscriptionItemPrice(BaseModel):
    product: str

    model_config = ConfigDict(extra="allow", frozen=True)

    @field_validator("product", mode="before")
    @classmethod
    def _normalize_product(cls, value: object) -> object:
        return _bare_product_id(value)


class SubscriptionItem(BaseModel):
    price: SubscriptionItemPrice

    model_config = ConfigDict(extra="allow", frozen=True)


class SubscriptionItemList(BaseModel):
    data: List[SubscriptionItem] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", frozen=True)


class Subscription(BaseModel):
    """Customer subscription as reported by the billing provider."""

    id: str
    status: Optional[str] = None
    items: SubscriptionItemList = Field(default_factory=SubscriptionItemList)

    model_config = ConfigDict(extra="allow", frozen=True)

    @property
    def product_ids(self) -> List[str]:
        """Product identifiers of the subscribed items, in item order."""

        return [item.price.product for item in self.items.data]


class SubscriptionList(BaseModel):
    data: List[Subscription] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", frozen=True)


class Customer(BaseModel):
    """Customer record with its subscriptions expanded."""

    id: str
    subscriptions: SubscriptionList = Field(default_factory=SubscriptionList)

    model_config = ConfigDict(extra="allow", frozen=True)

    @field_validator("subscriptions", mode="before")
    @classmethod
    def _default_subscriptions(cls, value: object) -> object:
        return {"data": []} if value is None else value
