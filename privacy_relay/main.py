"""
FastAPI application entry point for the privacy relay.

Wires the browser extension's endpoints to Stripe, the Supabase record
store and the OpenAI completion API.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, List, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from privacy_relay.api import ai, billing, entitlements, health
from privacy_relay.core.config import Settings, settings as default_settings, validate_config
from privacy_relay.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from privacy_relay.core.logging import LOGGER_NAME, configure_logging
from privacy_relay.core.middleware.request_id import RequestIdMiddleware
from privacy_relay.core.validation import validate_env
from privacy_relay.features.ai.service import PolicyAnalyzer, create_analyzer
from privacy_relay.features.billing.provider import BillingProvider
from privacy_relay.features.billing.stripe_provider import StripeProvider
from privacy_relay.features.entitlements.store import RecordStore, create_supabase_store

logger = logging.getLogger(LOGGER_NAME)


async def _build_missing_clients(app: FastAPI) -> List[Any]:
    """Construct any client handle that was not injected through create_app.

    Returns the handles built here; injected ones stay owned by the caller.
    """
    cfg: Settings = app.state.settings
    built: List[Any] = []

    if app.state.record_store is None and cfg.record_store_enabled:
        try:
            app.state.record_store = await create_supabase_store(
                cfg.SUPABASE_URL, cfg.SUPABASE_ANON_KEY, table=cfg.SUPABASE_TABLE
            )
            built.append(app.state.record_store)
        except Exception as e:
            # Entitlement checks fail closed and webhook writes return 500
            logger.error("[startup] record store unavailable", extra={"error_message": str(e)})

    if app.state.billing_provider is None and cfg.billing_enabled:
        app.state.billing_provider = StripeProvider(
            secret_key=cfg.STRIPE_SECRET_KEY,
            webhook_secret=cfg.STRIPE_WEBHOOK_SECRET,
        )

    if app.state.analyzer is None and cfg.ai_enabled:
        app.state.analyzer = create_analyzer(cfg.OPENAI_API_KEY, model=cfg.OPENAI_MODEL)
        built.append(app.state.analyzer)

    return built


async def _close_clients(clients: List[Any]) -> None:
    for client in clients:
        try:
            await client.aclose()
        except Exception as e:
            logger.warning(
                "[shutdown] client close failed",
                extra={"client": type(client).__name__, "error_message": str(e)},
            )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting privacy relay...")
    built = await _build_missing_clients(app)
    try:
        yield
    finally:
        await _close_clients(built)
        logger.info("Stopping privacy relay...")


def create_app(
    settings: Optional[Settings] = None,
    *,
    record_store: Optional[RecordStore] = None,
    billing_provider: Optional[BillingProvider] = None,
    analyzer: Optional[PolicyAnalyzer] = None,
) -> FastAPI:
    cfg = settings or default_settings

    configure_logging(cfg.ENV)
    validate_env(settings_obj=cfg)
    validate_config(settings_obj=cfg)

    app = FastAPI(title="Privacy GPT Relay", version="0.1.0", lifespan=lifespan)
    app.state.settings = cfg
    app.state.record_store = record_store
    app.state.billing_provider = billing_provider
    app.state.analyzer = analyzer

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health.router)
    app.include_router(entitlements.router)
    app.include_router(billing.router)
    app.include_router(ai.router)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app on PORT."""
    logger.info(f"Server running on port {default_settings.PORT}")
    uvicorn.run("privacy_relay.main:app", host="0.0.0.0", port=default_settings.PORT)


if __name__ == "__main__":
    run()
