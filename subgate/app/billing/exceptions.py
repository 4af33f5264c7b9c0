"""Errors raised while resolving entitlements from the billing provider."""
from __future__ import annotations

from typing import Optional


class EntitlementError(Exception):
    """Base class for terminal failures of a resolution request."""

    code = "entitlement_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def payload(self) -> dict[str, str]:
        """Generic action-level error body returned to transport callers."""

        return {"error": self.code}


class ConfigurationError(EntitlementError):
    """The billing portal configuration cannot back a catalog."""

    code = "configuration_error"


class ProviderFetchError(EntitlementError):
    """A configuration, price, or customer fetch against the provider failed."""

    code = "provider_fetch_error"
    status_code = 502

    def __init__(self, message: str, *, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation
