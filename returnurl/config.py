"""Environment-driven settings.

Read on every call to `get_settings()` rather than cached at import, so a
rotated secret takes effect for the next token without a restart.
"""
from __future__ import annotations

import os

from pydantic import BaseModel, Field

from .domain.paths import DEFAULT_ALLOWED_PATHS
from .domain.tokens import VALIDITY_MS, ReturnUrlSigner
from .logging_conf import get_logger

__all__ = [
    "FALLBACK_SECRET",
    "Settings",
    "get_secret_from_env",
    "get_validity_ms_from_env",
    "get_settings",
    "build_signer",
    "create_return_url",
    "validate_return_url",
]

FALLBACK_SECRET = "default-secret-change-in-production"

logger = get_logger("config")


class Settings(BaseModel):
    app_version: str = "0.1.0"
    log_level: str = "INFO"
    secret: str = Field(..., min_length=1)
    validity_ms: int = Field(VALIDITY_MS, gt=0)
    allowed_paths: frozenset[str] = DEFAULT_ALLOWED_PATHS


def get_secret_from_env() -> str:
    """Return RETURN_URL_SECRET, else JWT_SECRET, else the built-in fallback."""
    for name in ("RETURN_URL_SECRET", "JWT_SECRET"):
        val = os.getenv(name)
        if val:
            return val
    logger.warning(
        "config.fallback_secret",
        extra={"event": "fallback_secret", "hint": "set RETURN_URL_SECRET"},
    )
    return FALLBACK_SECRET


def get_validity_ms_from_env() -> int:
    raw = os.getenv("RETURN_URL_VALIDITY_MS")
    if raw is None:
        return VALIDITY_MS
    try:
        val = int(raw, 10)
    except ValueError as e:
        raise ValueError("RETURN_URL_VALIDITY_MS must be an integer") from e
    if val <= 0:
        raise ValueError("RETURN_URL_VALIDITY_MS must be positive")
    return val


def get_settings() -> Settings:
    return Settings(
        app_version=os.getenv("APP_VERSION", "0.1.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        secret=get_secret_from_env(),
        validity_ms=get_validity_ms_from_env(),
    )


def build_signer(settings: Settings | None = None) -> ReturnUrlSigner:
    settings = settings or get_settings()
    return ReturnUrlSigner(
        settings.secret,
        settings.allowed_paths,
        validity_ms=settings.validity_ms,
    )


def create_return_url(path: str) -> str:
    """Issue a token for `path` with the secret currently in the environment."""
    return build_signer().issue(path)


def validate_return_url(token: str) -> str | None:
    """Validate `token` with the secret currently in the environment."""
    return build_signer().validate(token)
