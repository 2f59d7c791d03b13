"""
Billing API routes.

Minimal surface:
- POST /stripe-webhook: Handle Stripe webhooks
- POST /create-checkout-session: Create checkout session
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel, ConfigDict, Field
from starlette.concurrency import run_in_threadpool

from privacy_relay.core.config import Settings
from privacy_relay.core.errors import BillingProviderError
from privacy_relay.dependencies import get_billing_provider, get_record_store, get_settings
from privacy_relay.features.billing.provider import BillingProvider
from privacy_relay.features.billing.service import ingest_webhook, require_checkout_fields, start_checkout
from privacy_relay.features.entitlements.store import RecordStore


logger = logging.getLogger(__name__)

router = APIRouter(tags=["billing"])


class CheckoutRequest(BaseModel):
    """Request to create checkout session."""
    model_config = ConfigDict(populate_by_name=True)

    price_id: Optional[str] = Field(default=None, alias="priceId")
    email: Optional[str] = None


@router.post("/stripe-webhook")
async def handle_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    provider: BillingProvider = Depends(get_billing_provider),
    store: Optional[RecordStore] = Depends(get_record_store),
):
    """
    Handle Stripe webhook events.

    The raw body is read untouched; the signature covers those exact bytes.

    Returns:
        {"received": true}

    Errors:
        400: Invalid signature or payload, or completed checkout without email
        500: Record store write failed
        503: Billing disabled
    """
    body = await request.body()
    await ingest_webhook(provider, store, body, stripe_signature)
    return {"received": True}


@router.post("/create-checkout-session")
async def create_checkout(
    request: Request,
    body: Optional[CheckoutRequest] = None,
    settings: Settings = Depends(get_settings),
):
    """
    Create Stripe checkout session for the email.

    Returns:
        {"sessionId": "cs_..."}

    Errors:
        400: Missing email or price
        500: Stripe API error
        503: Billing disabled
    """
    body = body or CheckoutRequest()
    email, price_id = require_checkout_fields(body.email, body.price_id or settings.STRIPE_PRICE_ID)
    provider = get_billing_provider(request)

    try:
        session_id = await run_in_threadpool(
            start_checkout,
            provider,
            price_id,
            email,
            settings.CHECKOUT_SUCCESS_URL,
            settings.CHECKOUT_CANCEL_URL,
        )
    except BillingProviderError as e:
        logger.error("[billing] stripe checkout error", extra={"email": email, "error_message": e.message})
        raise BillingProviderError("Failed to create checkout session") from e
    return {"sessionId": session_id}
