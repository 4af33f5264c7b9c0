"""Feature gating utilities evaluated against resolved subscription state."""
from .context import EntitlementContext
from .enforcement import require_gate
from .exceptions import FeatureGateError, GateSpecError
from .gates import GateMode, GateSpec, evaluate_gate

__all__ = [
    "EntitlementContext",
    "FeatureGateError",
    "GateMode",
    "GateSpec",
    "GateSpecError",
    "evaluate_gate",
    "require_gate",
]
