"""
Dependency wiring for the FastAPI app.

Client handles live on ``app.state``; they are either injected through
``create_app`` or built from settings during the app lifespan.
"""

from typing import Optional

from fastapi import Request

from privacy_relay.core.config import Settings
from privacy_relay.core.errors import ServiceUnavailableError
from privacy_relay.features.ai.service import PolicyAnalyzer
from privacy_relay.features.billing.provider import BillingProvider
from privacy_relay.features.entitlements.store import RecordStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_record_store(request: Request) -> Optional[RecordStore]:
    """May be None; callers decide whether that fails closed or errors."""
    return getattr(request.app.state, "record_store", None)


def get_billing_provider(request: Request) -> BillingProvider:
    provider = getattr(request.app.state, "billing_provider", None)
    if provider is None:
        raise ServiceUnavailableError(
            "Stripe is not configured. Set STRIPE_SECRET_KEY environment variable.",
            code="billing_disabled",
        )
    return provider


def get_analyzer(request: Request) -> PolicyAnalyzer:
    analyzer = getattr(request.app.state, "analyzer", None)
    if analyzer is None:
        raise ServiceUnavailableError(
            "AI is not configured. Set OPENAI_API_KEY environment variable.",
            code="ai_disabled",
        )
    return analyzer
