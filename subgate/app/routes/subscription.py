"""API route exposing subscription state and billing redirects."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..billing import ConfigurationError, EntitlementError
from ..entitlements import EntitlementService
from ..schemas.subscription import (
    ActionErrorResponse,
    CheckoutRequest,
    SessionResponse,
    SubscriptionAction,
)
from ..services.subscription import get_entitlement_service

logger = logging.getLogger("subscription_routes")

_CUSTOMER_ID_HEADER = os.getenv("CUSTOMER_ID_HEADER", "X-Customer-Id")


def get_customer_id(request: Request) -> str:
    """Return the billing customer id of the caller.

    Host applications normally override this dependency to map their
    authenticated user onto a billing customer.
    """

    customer_id = request.headers.get(_CUSTOMER_ID_HEADER)
    if not customer_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing billing customer")
    return customer_id


def _error(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ActionErrorResponse(error=message).model_dump())


router = APIRouter(prefix="/api/subscription", tags=["subscription"])


@router.api_route("", methods=["GET", "POST"])
async def subscription_action(
    action: Optional[str] = Query(None),
    payload: Optional[Dict[str, Any]] = Body(None),
    *,
    customer_id: str = Depends(get_customer_id),
    service: EntitlementService = Depends(get_entitlement_service),
) -> Any:
    try:
        selected = SubscriptionAction(action)
    except ValueError:
        return _error("Action not found")

    try:
        return await _dispatch(selected, payload, customer_id=customer_id, service=service)
    except ConfigurationError as exc:
        logger.error("Billing portal misconfigured for action %s: %s", selected.value, exc)
        return _error(exc.code, exc.status_code)
    except EntitlementError as exc:
        logger.warning("Billing provider failure for action %s customer=%s: %s", selected.value, customer_id, exc)
        return _error(exc.code, exc.status_code)


async def _dispatch(
    action: SubscriptionAction,
    payload: Optional[Dict[str, Any]],
    *,
    customer_id: str,
    service: EntitlementService,
) -> Any:
    if action is SubscriptionAction.USE_SUBSCRIPTION:
        state = await service.resolve(customer_id)
        return state.model_dump(mode="json")

    if action is SubscriptionAction.REDIRECT_TO_CHECKOUT:
        try:
            checkout = CheckoutRequest.model_validate(payload or {})
        except ValidationError:
            logger.info("Rejected checkout request for customer %s: missing or invalid price", customer_id)
            return _error("Error")
        try:
            session = await service.create_checkout_session(customer_id, checkout.price, metadata=checkout.metadata)
        except LookupError as exc:
            logger.info("Refused checkout for customer %s: %s", customer_id, exc)
            return _error("Error")
        return _session_body(session)

    session = await service.create_portal_session(customer_id)
    return _session_body(session)


def _session_body(session: Dict[str, Any]) -> Dict[str, Any]:
    return SessionResponse.from_session(session).model_dump(mode="json", by_alias=True)


__all__ = ["get_customer_id", "router", "subscription_action"]
