"""
Environment validation utilities.

Ensures the relay fails fast on misconfiguration while
remaining bypassable for tests via SKIP_ENV_VALIDATION.
"""

import os
from typing import Optional, Iterable
from urllib.parse import urlparse

from privacy_relay.core.config import settings


class EnvValidationError(RuntimeError):
    """Raised when environment validation fails."""


def _is_valid_http_url(url: str) -> bool:
    """Basic SUPABASE_URL validation using urlparse."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _require(vars_required: Iterable[str], source: object) -> None:
    for var in vars_required:
        if not getattr(source, var, None):
            raise EnvValidationError(f"{var} is required in production")


def validate_env(env: Optional[str] = None, settings_obj=None) -> bool:
    """Validate environment configuration.

    Args:
        env: Override environment name (defaults to settings.ENV)
        settings_obj: Override settings object (defaults to privacy_relay.core.config.settings)

    Returns:
        True if validation passes.

    Raises:
        EnvValidationError when a rule is violated.
    """
    if os.getenv("SKIP_ENV_VALIDATION") == "1":
        return True

    cfg = settings_obj or settings
    mode = (env or getattr(cfg, "ENV", "development") or "development").lower()
    supabase_url = getattr(cfg, "SUPABASE_URL", None)

    if supabase_url and not _is_valid_http_url(supabase_url):
        raise EnvValidationError("SUPABASE_URL must be a valid URL (e.g. https://<project>.supabase.co)")

    required_prod = [
        "STRIPE_SECRET_KEY",
        "STRIPE_WEBHOOK_SECRET",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "OPENAI_API_KEY",
    ]

    if mode == "production":
        _require(required_prod, cfg)
        if getattr(cfg, "ALLOWED_ORIGINS", "*").strip() == "*":
            raise EnvValidationError("ALLOWED_ORIGINS must name the extension origin in production")

    return True
