"""
Billing service orchestrator.

Coordinates:
- Checkout session creation
- Webhook ingestion (verify → filter → extract → persist)

All Stripe-specific code is in stripe_provider.py.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from privacy_relay.core.errors import RecordStoreError, ValidationError, WebhookVerificationError
from privacy_relay.core.logging import log_event
from privacy_relay.features.billing.provider import BillingProvider
from privacy_relay.features.entitlements.store import RecordStore
from privacy_relay.models.entitlement import EntitlementRecord


logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


@dataclass(frozen=True)
class WebhookAck:
    """Acknowledged webhook. `record` is set only when a write happened."""
    event_id: Optional[str]
    event_type: str
    handled: bool
    record: Optional[EntitlementRecord] = None


def require_checkout_fields(email: Optional[str], price_id: Optional[str]) -> Tuple[str, str]:
    """Reject a checkout request before any provider is touched."""
    if not email:
        raise ValidationError("Missing email")
    if not price_id:
        raise ValidationError("Missing priceId")
    return email, price_id


def start_checkout(
    provider: BillingProvider,
    price_id: Optional[str],
    email: Optional[str],
    success_url: str,
    cancel_url: str,
) -> str:
    """
    Start a subscription checkout for an email.

    Returns:
        Checkout session ID

    Raises:
        ValidationError: If email or price_id is missing
        BillingProviderError: If checkout creation fails
    """
    email, price_id = require_checkout_fields(email, price_id)

    session_id = provider.create_checkout_session(
        price_id=price_id,
        customer_email=email,
        success_url=success_url,
        cancel_url=cancel_url,
    )
    logger.info("[billing] checkout session created", extra={"email": email, "session_id": session_id})
    return session_id


async def ingest_webhook(
    provider: BillingProvider,
    store: Optional[RecordStore],
    body: bytes,
    signature: Optional[str],
    now: Optional[datetime] = None,
) -> WebhookAck:
    """
    Verify and consume a payment webhook.

    Every completed checkout appends a new record; a redelivered event
    appends again (no upsert by email).

    Raises:
        WebhookVerificationError: Signature or payload invalid (nothing written)
        ValidationError: Completed checkout without a customer email
        RecordStoreError: Store missing or insert failed
    """
    try:
        event = provider.verify_webhook(body, signature)
    except WebhookVerificationError as e:
        log_event(
            "warning",
            "webhook.rejected",
            error_code=e.code,
            extra={"error_message": e.message},
        )
        raise WebhookVerificationError(f"Webhook Error: {e.message}") from e

    if event.event_type != CHECKOUT_COMPLETED:
        log_event("info", "webhook.ignored", event_type=event.event_type, extra={"event_id": event.event_id})
        return WebhookAck(event_id=event.event_id, event_type=event.event_type, handled=False)

    email = event.customer_email
    if not email:
        log_event(
            "warning",
            "webhook.missing_email",
            event_type=event.event_type,
            error_code=ValidationError.code,
            extra={"event_id": event.event_id},
        )
        raise ValidationError("Missing email")

    if store is None:
        log_event(
            "error",
            "webhook.store_unavailable",
            email=email,
            event_type=event.event_type,
            error_code=RecordStoreError.code,
            extra={"event_id": event.event_id},
        )
        raise RecordStoreError("Failed to store Pro user")

    record = EntitlementRecord(
        email=email,
        is_pro=True,
        upgraded_at=now or datetime.now(timezone.utc),
    )
    try:
        await store.insert(record)
    except RecordStoreError as e:
        log_event(
            "error",
            "webhook.store_failed",
            email=email,
            event_type=event.event_type,
            error_code=e.code,
            extra={"event_id": event.event_id, "error_message": e.message},
        )
        raise RecordStoreError("Failed to store Pro user") from e

    log_event("info", "webhook.pro_user_saved", email=email, event_type=event.event_type, extra={"event_id": event.event_id})
    return WebhookAck(event_id=event.event_id, event_type=event.event_type, handled=True, record=record)
