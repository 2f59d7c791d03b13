"""Error normalization and handlers.

Every failure leaves the relay as a JSON object carrying an ``error``
string so the extension can render it without crashing.
"""

import logging
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.requests import Request

from privacy_relay.core.logging import LOGGER_NAME, get_request_id


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.request_id = request_id
        # Domain fields merged into the error body, e.g. {"isPro": False}
        self.payload = payload or {}


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class WebhookVerificationError(AppError):
    code = "webhook_verification_failed"
    status_code = 400


class RecordStoreError(AppError):
    code = "record_store_error"
    status_code = 500


class BillingProviderError(AppError):
    code = "billing_provider_error"
    status_code = 500


class CompletionError(AppError):
    code = "completion_error"
    status_code = 500


class ServiceUnavailableError(AppError):
    code = "service_unavailable"
    status_code = 503


def _extract_request_id(request: Request, fallback: Optional[str] = None) -> str:
    return (
        getattr(request.state, "request_id", None)
        or get_request_id()
        or fallback
        or str(uuid4())
    )


def _error_payload(code: str, message: str, request_id: str, extra: Optional[Dict[str, Any]] = None) -> dict:
    payload: Dict[str, Any] = dict(extra or {})
    payload.update({"error": message, "code": code, "request_id": request_id})
    return payload


def _respond(status_code: int, payload: dict, rid: str) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def app_error_handler(request: Request, exc: AppError):
    rid = exc.request_id or _extract_request_id(request)
    payload = _error_payload(exc.code, exc.message, rid, exc.payload)
    logger = logging.getLogger(LOGGER_NAME)
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        "app.error",
        extra={"request_id": rid, "error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    return _respond(exc.status_code, payload, rid)


async def http_error_handler(request: Request, exc: HTTPException):
    rid = _extract_request_id(request)
    code = "not_found" if exc.status_code == 404 else "http_error"
    message = exc.detail if isinstance(exc.detail, str) and exc.detail else "HTTP error"
    payload = _error_payload(code, message, rid)
    logger = logging.getLogger(LOGGER_NAME)
    logger.warning("http.error", extra={"request_id": rid, "error_code": code, "status": exc.status_code})
    return _respond(exc.status_code, payload, rid)


# Fields every error body on a path must carry, even when the body failed to parse
_PATH_ERROR_FIELDS: Dict[str, Dict[str, Any]] = {
    "/check-pro": {"isPro": False},
}


async def request_validation_handler(request: Request, exc: RequestValidationError):
    rid = _extract_request_id(request)
    logger = logging.getLogger(LOGGER_NAME)
    logger.warning("request.invalid", extra={"request_id": rid, "error_code": "validation_error", "status": 400})
    extra = _PATH_ERROR_FIELDS.get(request.url.path)
    return _respond(400, _error_payload("validation_error", "Invalid request body", rid, extra), rid)


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _extract_request_id(request)
    logger = logging.getLogger(LOGGER_NAME)
    logger.error("unhandled.exception", exc_info=exc, extra={"request_id": rid, "error_code": "internal_error"})
    return _respond(500, _error_payload("internal_error", "Internal server error", rid), rid)
