"""AI analysis API.

Entitlement is checked and logged but never gates the call: free and Pro
users both receive a completion.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from privacy_relay.core.errors import ValidationError
from privacy_relay.core.logging import log_event
from privacy_relay.dependencies import get_analyzer, get_record_store
from privacy_relay.features.entitlements.service import resolve_entitlement
from privacy_relay.features.entitlements.store import RecordStore

router = APIRouter(tags=["ai"])


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selected_text: Optional[str] = Field(default=None, alias="selectedText")
    email: Optional[str] = None


@router.post("/analyze")
async def analyze_endpoint(
    request: Request,
    body: Optional[AnalyzeRequest] = None,
    store: Optional[RecordStore] = Depends(get_record_store),
):
    if body is None or not body.selected_text or not body.email:
        raise ValidationError("Missing selectedText or email")
    # A malformed request is a 400 even while AI is disabled
    analyzer = get_analyzer(request)

    check = await resolve_entitlement(store, body.email)
    log_event(
        "info",
        "analyze.pro_access_granted" if check.is_pro else "analyze.free_user",
        email=body.email,
        extra={"entitlement_status": check.status.value},
    )

    summary = await analyzer.analyze(body.selected_text)
    return {"summary": summary}
