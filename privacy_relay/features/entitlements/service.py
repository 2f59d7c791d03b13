"""
privacy_relay/features/entitlements/service.py

Entitlement resolver.

Answers whether an email currently holds Pro access. The check is
fail-closed: a store error is reported as UNKNOWN internally and collapses
to "not Pro" at the HTTP boundary.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

from privacy_relay.core.errors import RecordStoreError
from privacy_relay.features.entitlements.store import RecordStore
from privacy_relay.models.entitlement import EntitlementRecord


logger = logging.getLogger(__name__)


class EntitlementStatus(str, Enum):
    """Outcome of an entitlement lookup."""
    ENTITLED = "ENTITLED"
    NOT_ENTITLED = "NOT_ENTITLED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class EntitlementCheck:
    status: EntitlementStatus
    email: str
    record: Optional[EntitlementRecord] = None
    error: Optional[Exception] = None

    @property
    def is_pro(self) -> bool:
        return self.status is EntitlementStatus.ENTITLED


async def resolve_entitlement(store: Optional[RecordStore], email: str) -> EntitlementCheck:
    """Look up the Pro entitlement for an email.

    Never raises for store problems; those yield EntitlementStatus.UNKNOWN.
    """
    if store is None:
        logger.warning(
            "[entitlements] record store not configured, denying",
            extra={"email": email},
        )
        return EntitlementCheck(
            status=EntitlementStatus.UNKNOWN,
            email=email,
            error=RecordStoreError("Record store not configured"),
        )

    try:
        record = await store.find_by_email(email)
    except Exception as e:
        # Any store failure denies access
        logger.warning(
            "[entitlements] store lookup failed, denying",
            extra={"email": email, "error_message": str(e)},
        )
        return EntitlementCheck(status=EntitlementStatus.UNKNOWN, email=email, error=e)

    if record is not None and record.is_pro is True:
        status = EntitlementStatus.ENTITLED
    else:
        status = EntitlementStatus.NOT_ENTITLED

    logger.info(
        "[entitlements] pro check",
        extra={"email": email, "entitlement_status": status.value},
    )
    return EntitlementCheck(status=status, email=email, record=record)


async def is_pro_user(store: Optional[RecordStore], email: str) -> bool:
    """Collapsed form of resolve_entitlement for the HTTP boundary."""
    check = await resolve_entitlement(store, email)
    return check.is_pro
