"""
Billing provider protocol.

Defines the interface for billing providers (Stripe, etc.).
This allows swapping providers without changing business logic.
"""
from typing import Protocol, Dict, Any, Optional
from dataclasses import dataclass, field

from privacy_relay.core.errors import BillingProviderError, WebhookVerificationError

__all__ = [
    "BillingProvider",
    "BillingProviderError",
    "BillingWebhookEvent",
    "WebhookVerificationError",
]


@dataclass(frozen=True)
class BillingWebhookEvent:
    """A verified webhook event, parsed only after its signature checked out."""
    event_id: Optional[str]
    event_type: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def customer_email(self) -> Optional[str]:
        details = self.data.get("customer_details")
        if not isinstance(details, dict):
            return None
        email = details.get("email")
        return email if isinstance(email, str) and email else None


class BillingProvider(Protocol):
    """
    Protocol for billing providers.

    Implementations must handle:
    - Checkout session creation
    - Webhook signature verification and parsing
    """

    def create_checkout_session(
        self,
        price_id: str,
        customer_email: str,
        success_url: str,
        cancel_url: str,
    ) -> str:
        """
        Create a subscription checkout session.

        Args:
            price_id: Provider price ID (e.g., Stripe price ID)
            customer_email: Email prefilled on the checkout page
            success_url: URL to redirect on success
            cancel_url: URL to redirect on cancellation

        Returns:
            Checkout session ID

        Raises:
            BillingProviderError: If session creation fails
        """
        ...

    def verify_webhook(self, body: bytes, signature: Optional[str]) -> BillingWebhookEvent:
        """
        Verify webhook signature and parse event.

        Args:
            body: Raw webhook body, exactly as received
            signature: Signature header value

        Returns:
            Parsed webhook event

        Raises:
            WebhookVerificationError: If signature invalid or parsing fails
        """
        ...
