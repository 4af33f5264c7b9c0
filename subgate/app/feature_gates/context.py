"""Convenience wrapper around a resolved subscription state for feature gating."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional

from ..billing.models import Subscription
from ..entitlements.models import SubscriptionState
from .enforcement import require_gate
from .gates import GateSpec, evaluate_gate


@dataclass(frozen=True)
class EntitlementContext:
    """Facade exposing gating-centric helpers for a customer's subscription state."""

    state: SubscriptionState

    @property
    def subscription(self) -> Optional[Subscription]:
        return self.state.subscription

    @property
    def is_subscribed(self) -> bool:
        return self.state.subscription is not None

    @property
    def features(self) -> FrozenSet[str]:
        return frozenset(self.state.features())

    def has_product(self, product_id: str) -> bool:
        return evaluate_gate(self.state, GateSpec.product(product_id))

    def has_feature(self, name: str) -> bool:
        return evaluate_gate(self.state, GateSpec.feature(name))

    def visible(self, spec: GateSpec) -> bool:
        """Return whether content behind ``spec`` should be shown."""

        return evaluate_gate(self.state, spec)

    def require(self, spec: GateSpec, *, error_code: str = "entitlement_required") -> None:
        """Ensure the gate is open, raising :class:`FeatureGateError` otherwise."""

        require_gate(self.state, spec, error_code=error_code)
