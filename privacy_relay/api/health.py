"""
Liveness endpoints.

Neither endpoint touches an external service.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])

LIVENESS_MESSAGE = "Privacy GPT API is live with Email-Based Pro Access"


@router.get("/", response_class=PlainTextResponse)
def root():
    return LIVENESS_MESSAGE


@router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {"status": "ok"}
