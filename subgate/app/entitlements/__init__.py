"""Entitlement resolution: catalog reconstruction and subscription lookup."""

from .catalog import (
    assemble_catalog,
    build_catalog,
    expand_prices,
    load_default_configuration,
    select_default_configuration,
)
from .models import Catalog, CatalogEntry, ExpandedPrice, SubscriptionState
from .service import EntitlementService, load_subscription

__all__ = [
    "Catalog",
    "CatalogEntry",
    "EntitlementService",
    "ExpandedPrice",
    "SubscriptionState",
    "assemble_catalog",
    "build_catalog",
    "expand_prices",
    "load_default_configuration",
    "load_subscription",
    "select_default_configuration",
]
