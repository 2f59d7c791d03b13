# privacy_relay/conftest.py
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add repository root to PYTHONPATH
REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from privacy_relay.core.config import Settings
from privacy_relay.features.ai.service import PolicyAnalyzer
from privacy_relay.features.billing.stripe_provider import StripeProvider
from privacy_relay.main import create_app
from privacy_relay.tests.mocks import WEBHOOK_SECRET, FakeOpenAI, FakeRecordStore


@pytest.fixture
def settings():
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        ENV="test",
        STRIPE_SECRET_KEY="sk_test_123",
        STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET,
        STRIPE_PRICE_ID="price_default",
        SUPABASE_URL=None,
        SUPABASE_ANON_KEY=None,
        OPENAI_API_KEY=None,
        ALLOWED_ORIGINS="chrome-extension://test-extension-id",
    )


@pytest.fixture
def record_store():
    return FakeRecordStore()


@pytest.fixture
def stripe_provider():
    return StripeProvider(secret_key="sk_test_123", webhook_secret=WEBHOOK_SECRET)


@pytest.fixture
def openai_client():
    return FakeOpenAI()


@pytest.fixture
def analyzer(openai_client):
    return PolicyAnalyzer(openai_client, model="gpt-4o")


@pytest.fixture
def app(settings, record_store, stripe_provider, analyzer):
    return create_app(
        settings,
        record_store=record_store,
        billing_provider=stripe_provider,
        analyzer=analyzer,
    )


@pytest.fixture
def client(app):
    return TestClient(app)
