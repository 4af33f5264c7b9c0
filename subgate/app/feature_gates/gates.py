"""Declarative access gates evaluated against a resolved subscription state."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..entitlements.models import SubscriptionState
from .exceptions import GateSpecError


class GateMode(str, Enum):
    """What a gate checks for."""

    UNSUBSCRIBED = "unsubscribed"
    PRODUCT = "product"
    FEATURE = "feature"


def _product_id(product: Any) -> Optional[str]:
    if product is None or isinstance(product, str):
        return product
    if isinstance(product, dict):
        return product.get("id")
    return getattr(product, "id", None)


@dataclass(frozen=True)
class GateSpec:
    """A single gate: one mode, its target, and whether to invert the result."""

    mode: GateMode
    target: Optional[str] = None
    negate: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.mode, GateMode):
            try:
                object.__setattr__(self, "mode", GateMode(self.mode))
            except ValueError as exc:
                raise GateSpecError(f"Unknown gate mode: {self.mode!r}") from exc
        self.validate()

    def validate(self) -> None:
        if self.mode is GateMode.UNSUBSCRIBED:
            if self.target is not None:
                raise GateSpecError("An unsubscribed gate takes no target")
        elif not self.target:
            raise GateSpecError(f"A {self.mode.value} gate requires a target")

    @classmethod
    def unsubscribed(cls, *, negate: bool = False) -> "GateSpec":
        return cls(GateMode.UNSUBSCRIBED, negate=negate)

    @classmethod
    def product(cls, product_id: str, *, negate: bool = False) -> "GateSpec":
        return cls(GateMode.PRODUCT, product_id, negate=negate)

    @classmethod
    def feature(cls, name: str, *, negate: bool = False) -> "GateSpec":
        return cls(GateMode.FEATURE, name, negate=negate)

    @classmethod
    def from_props(
        cls,
        *,
        unsubscribed: bool = False,
        product: Any = None,
        feature: Optional[str] = None,
        negate: bool = False,
    ) -> "GateSpec":
        """Build a spec from gate-component style keyword props.

        ``product`` may be a product id or any object or mapping with an
        ``id``. Exactly one of ``unsubscribed``, ``product`` and ``feature``
        must be set.
        """

        product_id = _product_id(product)
        selected = [bool(unsubscribed), bool(product_id), bool(feature)]
        if sum(selected) != 1:
            raise GateSpecError("Pass exactly one of unsubscribed, product or feature to a gate")

        if unsubscribed:
            return cls.unsubscribed(negate=negate)
        if product_id:
            return cls.product(product_id, negate=negate)
        return cls.feature(feature, negate=negate)


def evaluate_gate(state: SubscriptionState, spec: GateSpec) -> bool:
    """Return whether content behind ``spec`` is visible for ``state``.

    Product and feature gates are never visible without a subscription, even
    when negated; negation only inverts the membership test.
    """

    spec.validate()

    if spec.mode is GateMode.UNSUBSCRIBED:
        return (state.subscription is None) != spec.negate

    if state.subscription is None:
        return False

    if spec.mode is GateMode.PRODUCT:
        condition = spec.target in state.subscribed_product_ids()
    else:
        condition = spec.target in state.features()
    return condition != spec.negate


__all__ = ["GateMode", "GateSpec", "evaluate_gate"]
