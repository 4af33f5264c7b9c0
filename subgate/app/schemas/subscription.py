"""API schemas for the subscription action endpoint."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SubscriptionAction(str, Enum):
    USE_SUBSCRIPTION = "useSubscription"
    REDIRECT_TO_CHECKOUT = "redirectToCheckout"
    REDIRECT_TO_BILLING_PORTAL = "redirectToBillingPortal"
    REDIRECT_TO_CUSTOMER_PORTAL = "redirectToCustomerPortal"


class CheckoutRequest(BaseModel):
    price: str = Field(min_length=1)
    metadata: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


class SessionResponse(BaseModel):
    id: Optional[str] = None
    url: str
    expires_at: Optional[datetime] = Field(alias="expiresAt", default=None)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("expires_at", mode="before")
    @classmethod
    def _from_timestamp(cls, value: object) -> object:
        # Stripe reports epoch seconds.
        if isinstance(value, int):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        return value

    @classmethod
    def from_session(cls, session: Dict[str, Any]) -> "SessionResponse":
        return cls(id=session.get("id"), url=session.get("url") or "", expires_at=session.get("expires_at"))


class ActionErrorResponse(BaseModel):
    error: str
