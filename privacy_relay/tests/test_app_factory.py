"""Tests for app construction and lifespan client wiring."""

import pytest
from fastapi.testclient import TestClient

import privacy_relay.main as main_module
from privacy_relay.core.config import Settings
from privacy_relay.features.ai.service import PolicyAnalyzer
from privacy_relay.features.billing.stripe_provider import StripeProvider
from privacy_relay.main import create_app
from privacy_relay.tests.mocks import FakeOpenAI, FakeRecordStore


def test_injected_clients_are_kept(settings, record_store, stripe_provider, analyzer):
    app = create_app(settings, record_store=record_store, billing_provider=stripe_provider, analyzer=analyzer)
    with TestClient(app):
        assert app.state.record_store is record_store
        assert app.state.billing_provider is stripe_provider
        assert app.state.analyzer is analyzer


def test_lifespan_builds_clients_from_settings(monkeypatch):
    built = {}

    async def fake_store(url, key, table="pro_users"):
        built["store"] = (url, key, table)
        return FakeRecordStore()

    monkeypatch.setattr(main_module, "create_supabase_store", fake_store)
    settings = Settings(
        _env_file=None,
        STRIPE_SECRET_KEY="sk_test_123",
        STRIPE_WEBHOOK_SECRET="whsec_x",
        SUPABASE_URL="https://project.supabase.co",
        SUPABASE_ANON_KEY="anon",
        SUPABASE_TABLE="pro_users",
        OPENAI_API_KEY="sk-openai-test",
        OPENAI_MODEL="gpt-4o-mini",
    )
    app = create_app(settings)

    with TestClient(app):
        assert isinstance(app.state.billing_provider, StripeProvider)
        assert isinstance(app.state.record_store, FakeRecordStore)
        assert isinstance(app.state.analyzer, PolicyAnalyzer)
        assert app.state.analyzer.model == "gpt-4o-mini"

    assert built["store"] == ("https://project.supabase.co", "anon", "pro_users")


def test_store_startup_failure_fails_closed(monkeypatch):
    async def broken_store(url, key, table="pro_users"):
        raise RuntimeError("dns failure")

    monkeypatch.setattr(main_module, "create_supabase_store", broken_store)
    settings = Settings(
        _env_file=None,
        SUPABASE_URL="https://project.supabase.co",
        SUPABASE_ANON_KEY="anon",
        STRIPE_SECRET_KEY=None,
        OPENAI_API_KEY=None,
    )
    app = create_app(settings)

    with TestClient(app) as client:
        assert app.state.record_store is None
        resp = client.get("/check-pro", params={"email": "pro@example.com"})
        assert resp.status_code == 200
        assert resp.json() == {"isPro": False}


def test_stripe_provider_requires_secret_key():
    from privacy_relay.core.errors import BillingProviderError

    with pytest.raises(BillingProviderError):
        StripeProvider(secret_key="")


def test_lifespan_closes_only_the_clients_it_built(monkeypatch, stripe_provider):
    built_store = FakeRecordStore()
    built_openai = FakeOpenAI()

    async def fake_store(url, key, table="pro_users"):
        return built_store

    monkeypatch.setattr(main_module, "create_supabase_store", fake_store)
    monkeypatch.setattr(main_module, "create_analyzer", lambda api_key, model: PolicyAnalyzer(built_openai, model=model))
    settings = Settings(
        _env_file=None,
        SUPABASE_URL="https://project.supabase.co",
        SUPABASE_ANON_KEY="anon",
        OPENAI_API_KEY="sk-openai-test",
    )
    app = create_app(settings, billing_provider=stripe_provider)

    with TestClient(app):
        assert built_store.closed is False
        assert built_openai.closed is False

    assert built_store.closed is True
    assert built_openai.closed is True


def test_lifespan_leaves_injected_clients_open(settings, record_store, openai_client, analyzer):
    app = create_app(settings, record_store=record_store, analyzer=analyzer)
    with TestClient(app):
        pass
    assert record_store.closed is False
    assert openai_client.closed is False
