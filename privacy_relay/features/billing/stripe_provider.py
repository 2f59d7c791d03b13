"""
Stripe billing provider implementation.

Implements BillingProvider protocol using the Stripe API.
Handles webhook signature verification and event parsing.
"""
import json
from typing import Optional

import stripe

from privacy_relay.features.billing.provider import (
    BillingProviderError,
    BillingWebhookEvent,
    WebhookVerificationError,
)


class StripeProvider:
    """Stripe implementation of BillingProvider protocol."""

    def __init__(self, secret_key: str, webhook_secret: Optional[str] = None, tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE):
        """
        Initialize Stripe provider.

        The key is passed per call rather than set on the stripe module,
        so several providers can coexist in one process.

        Args:
            secret_key: Stripe secret key
            webhook_secret: Stripe webhook signing secret
            tolerance: Maximum signature age in seconds
        """
        if not secret_key:
            raise BillingProviderError("STRIPE_SECRET_KEY not configured")

        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance

    def create_checkout_session(
        self,
        price_id: str,
        customer_email: str,
        success_url: str,
        cancel_url: str,
    ) -> str:
        """Create Stripe checkout session."""
        try:
            session = stripe.checkout.Session.create(
                api_key=self.secret_key,
                mode="subscription",
                customer_email=customer_email,
                line_items=[{"price": price_id, "quantity": 1}],
                success_url=success_url,
                cancel_url=cancel_url,
            )
            return session.id
        except stripe.StripeError as e:
            raise BillingProviderError(f"Stripe checkout session creation failed: {e}")

    def verify_webhook(self, body: bytes, signature: Optional[str]) -> BillingWebhookEvent:
        """Verify Stripe webhook signature, then parse the event."""
        if not self.webhook_secret:
            raise WebhookVerificationError("STRIPE_WEBHOOK_SECRET not configured")
        if not signature:
            raise WebhookVerificationError("Missing stripe-signature header")

        try:
            payload = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise WebhookVerificationError(f"Invalid payload: {e}")

        # The signature covers the raw bytes, so verify before any JSON parsing
        try:
            stripe.WebhookSignature.verify_header(
                payload, signature, self.webhook_secret, self.tolerance
            )
        except stripe.SignatureVerificationError as e:
            raise WebhookVerificationError(f"Invalid signature: {e}")

        try:
            event = json.loads(payload)
        except ValueError as e:
            raise WebhookVerificationError(f"Invalid payload: {e}")
        if not isinstance(event, dict) or not event.get("type"):
            raise WebhookVerificationError("Invalid payload: missing event type")

        data = event.get("data") or {}
        if not isinstance(data, dict):
            raise WebhookVerificationError("Invalid payload: data is not an object")
        obj = data.get("object") or {}
        if not isinstance(obj, dict):
            raise WebhookVerificationError("Invalid payload: data.object is not an object")
        return BillingWebhookEvent(
            event_id=event.get("id"),
            event_type=event["type"],
            data=obj,
        )
