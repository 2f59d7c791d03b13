"""
Record store adapter.

Defines the interface for the hosted store holding entitlement records,
plus the Supabase implementation. Only two operations exist: a lookup by
email and an append-only insert.
"""
import logging
from typing import Any, Optional, Protocol

from supabase import acreate_client

from privacy_relay.core.errors import RecordStoreError
from privacy_relay.models.entitlement import EntitlementRecord

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """
    Protocol for entitlement record stores.

    Implementations raise RecordStoreError for any communication failure
    so callers can decide between failing closed and surfacing a 500.
    """

    async def find_by_email(self, email: str) -> Optional[EntitlementRecord]:
        """Return at most one record for the email, or None."""
        ...

    async def insert(self, record: EntitlementRecord) -> None:
        """Append a record. No uniqueness check is performed."""
        ...


class SupabaseRecordStore:
    """Supabase (PostgREST) implementation of RecordStore."""

    def __init__(self, client: Any, table: str = "pro_users"):
        """
        Args:
            client: supabase AsyncClient
            table: table holding one row per recorded checkout
        """
        self.client = client
        self.table = table

    async def find_by_email(self, email: str) -> Optional[EntitlementRecord]:
        try:
            response = await (
                self.client.table(self.table)
                .select("email,isPro,upgradedAt")
                .eq("email", email)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise RecordStoreError(f"Record lookup failed: {e}") from e

        rows = getattr(response, "data", None) or []
        if not rows:
            return None
        return EntitlementRecord.from_row(rows[0])

    async def insert(self, record: EntitlementRecord) -> None:
        try:
            await self.client.table(self.table).insert([record.to_row()]).execute()
        except Exception as e:
            raise RecordStoreError(f"Record insert failed: {e}") from e

    async def aclose(self) -> None:
        """Close the PostgREST session behind the client."""
        await self.client.postgrest.aclose()


async def create_supabase_store(url: str, key: str, table: str = "pro_users") -> SupabaseRecordStore:
    """Build a SupabaseRecordStore backed by a fresh async client."""
    client = await acreate_client(url, key)
    logger.info("[store] supabase client ready", extra={"table": table})
    return SupabaseRecordStore(client, table=table)
