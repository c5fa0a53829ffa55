from __future__ import annotations

import asyncio
import time

import httpx

from returnurl.logging_conf import get_logger
from runner.types import IssueError, SmokeError, ValidateError

logger = get_logger("runner.client")


async def wait_for_health(base_url: str, timeout_s: float = 20.0) -> None:
    """Ping /health until it returns ok or raise after a timeout."""
    deadline = time.monotonic() + timeout_s
    async with httpx.AsyncClient(base_url=base_url, timeout=5.0) as client:
        while time.monotonic() < deadline:
            try:
                r = await client.get("/health")
                if r.status_code == 200 and r.json().get("ok") is True:
                    logger.info("health.ok", extra={"event": "health_ok"})
                    return
            except httpx.HTTPError:
                pass
            await asyncio.sleep(0.25)
    raise SmokeError("Health check did not pass within timeout")


async def issue_token(client: httpx.AsyncClient, path: str) -> str:
    """Ask the server for a return token; "" when the path is refused.

    - 200 yields the token, 422 `path_not_allowed` yields ""
    - Anything else is a server fault and raises
    """
    r = await client.post("/return_urls", json={"path": path})
    if r.status_code == 422:
        detail = r.json().get("detail")
        if isinstance(detail, dict) and detail.get("error_code") == "path_not_allowed":
            return ""
    if r.status_code != 200:
        raise IssueError(f"issue for {path} returned HTTP {r.status_code}")
    token = r.json()["token"]
    logger.info("token.issued", extra={"event": "token_issued", "path": path, "token": token})
    return token


async def validate_token(
    client: httpx.AsyncClient, token: str, *, retries: int = 2
) -> str | None:
    """Return the validated path for `token`, or None, with basic retry."""
    last_err: Exception | None = None
    for attempt in range(retries):
        try:
            r = await client.get("/return_urls/validate", params={"token": token})
            r.raise_for_status()
            data = r.json()
            return data["path"] if data["valid"] else None
        except httpx.HTTPError as e:  # pragma: no cover - network flakiness
            last_err = e
            logger.warning(
                "validate.retry",
                extra={
                    "event": "validate_retry",
                    "attempt": attempt + 1,
                    "error": str(e),
                },
            )
    raise ValidateError(str(last_err) if last_err else "validate failed")


async def resolve_redirect(client: httpx.AsyncClient, token: str | None, account_type: str) -> dict:
    r = await client.post("/auth/redirect", json={"token": token, "account_type": account_type})
    r.raise_for_status()
    return r.json()
