"""Helpers for enforcing gates on API and service layers."""
from __future__ import annotations

from ..entitlements.models import SubscriptionState
from .exceptions import FeatureGateError
from .gates import GateMode, GateSpec, evaluate_gate


def require_gate(
    state: SubscriptionState,
    spec: GateSpec,
    *,
    error_code: str = "entitlement_required",
    message: str | None = None,
) -> None:
    """Ensure a gate is open before proceeding.

    Parameters
    ----------
    state:
        Resolved subscription state for the current customer.
    spec:
        The gate that must evaluate visible.
    error_code:
        Optional override for the surfaced error code when the gate is
        closed. Defaults to ``"entitlement_required"``.
    message:
        Optional human-friendly message explaining the failure. If omitted, a
        default message describing the gate is used.
    """

    if evaluate_gate(state, spec):
        return

    if spec.mode is GateMode.UNSUBSCRIBED:
        description = "an active subscription" if spec.negate else "no subscription"
    else:
        qualifier = "no " if spec.negate else ""
        description = f"{qualifier}{spec.mode.value} '{spec.target}'"
    raise FeatureGateError(
        code=error_code,
        message=message or f"This action requires {description}.",
        detail={"gate": spec.mode.value, "target": spec.target, "negate": spec.negate},
    )
