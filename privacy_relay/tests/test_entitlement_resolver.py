"""Tests for the fail-closed entitlement resolver."""

import pytest
from datetime import datetime, timezone

from privacy_relay.features.entitlements.service import (
    EntitlementStatus,
    is_pro_user,
    resolve_entitlement,
)
from privacy_relay.models.entitlement import EntitlementRecord
from privacy_relay.tests.mocks import FakeRecordStore


def _record(email, is_pro=True):
    return EntitlementRecord(email=email, is_pro=is_pro, upgraded_at=datetime(2026, 1, 1, tzinfo=timezone.utc))


@pytest.mark.asyncio
async def test_no_record_is_not_entitled():
    store = FakeRecordStore()
    check = await resolve_entitlement(store, "nobody@example.com")
    assert check.status is EntitlementStatus.NOT_ENTITLED
    assert check.is_pro is False
    assert check.error is None
    assert store.find_calls == ["nobody@example.com"]


@pytest.mark.asyncio
async def test_pro_record_is_entitled():
    store = FakeRecordStore([_record("pro@example.com")])
    check = await resolve_entitlement(store, "pro@example.com")
    assert check.status is EntitlementStatus.ENTITLED
    assert check.is_pro is True
    assert check.record.email == "pro@example.com"


@pytest.mark.asyncio
async def test_record_with_is_pro_false_is_not_entitled():
    store = FakeRecordStore([_record("lapsed@example.com", is_pro=False)])
    assert await is_pro_user(store, "lapsed@example.com") is False


@pytest.mark.asyncio
async def test_email_is_matched_exactly():
    store = FakeRecordStore([_record("Pro@Example.com")])
    assert await is_pro_user(store, "pro@example.com") is False
    assert await is_pro_user(store, "Pro@Example.com") is True


@pytest.mark.asyncio
async def test_store_error_is_unknown_and_denied():
    store = FakeRecordStore([_record("pro@example.com")])
    store.fail_find = True

    check = await resolve_entitlement(store, "pro@example.com")

    assert check.status is EntitlementStatus.UNKNOWN
    assert check.is_pro is False
    assert check.error is not None


@pytest.mark.asyncio
async def test_unexpected_store_exception_never_propagates():
    class ExplodingStore:
        async def find_by_email(self, email):
            raise ConnectionResetError("socket closed")

        async def insert(self, record):
            raise AssertionError("not used")

    check = await resolve_entitlement(ExplodingStore(), "pro@example.com")
    assert check.status is EntitlementStatus.UNKNOWN
    assert isinstance(check.error, ConnectionResetError)


@pytest.mark.asyncio
async def test_missing_store_denies():
    check = await resolve_entitlement(None, "pro@example.com")
    assert check.status is EntitlementStatus.UNKNOWN
    assert check.is_pro is False
