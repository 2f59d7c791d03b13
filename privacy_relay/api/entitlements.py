"""
Entitlement API routes.

- GET  /check-pro?email=...
- POST /check-pro {"email": ...}

Both answer {"isPro": bool}; a lookup failure reads as not Pro.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from privacy_relay.core.errors import ValidationError
from privacy_relay.dependencies import get_record_store
from privacy_relay.features.entitlements.service import is_pro_user
from privacy_relay.features.entitlements.store import RecordStore


router = APIRouter(tags=["entitlements"])


class CheckProRequest(BaseModel):
    email: Optional[str] = None


def _require_email(email: Optional[str]) -> str:
    if not email:
        raise ValidationError("Missing email", payload={"isPro": False})
    return email


@router.get("/check-pro")
async def check_pro_query(
    email: Optional[str] = Query(None),
    store: Optional[RecordStore] = Depends(get_record_store),
):
    email = _require_email(email)
    return {"isPro": await is_pro_user(store, email)}


@router.post("/check-pro")
async def check_pro_body(
    body: Optional[CheckProRequest] = None,
    store: Optional[RecordStore] = Depends(get_record_store),
):
    email = _require_email(body.email if body else None)
    return {"isPro": await is_pro_user(store, email)}
