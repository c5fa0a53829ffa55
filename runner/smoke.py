#!/usr/bin/env python3
"""End-to-end smoke run against a live return-URL server.

Steps:
- wait for server health
- issue tokens for every allow-listed path plus one refused path, concurrently
- validate each issued token and a tampered copy of it
- resolve a post sign-in redirect with and without a token
- emit a compact summary and exit code
"""
from __future__ import annotations

import asyncio
import sys

import httpx

from returnurl.domain.paths import ReturnPath
from returnurl.logging_conf import get_logger, setup_logging
from runner.cli import parse_args
from runner.client import issue_token, resolve_redirect, validate_token, wait_for_health
from runner.types import Check
from runner.utils import summarize, tamper_token

setup_logging()
logger = get_logger("runner")

REFUSED_PATH = "/not-allowed"


async def _check_tokens(client: httpx.AsyncClient, tokens: dict[str, str]) -> list[Check]:
    checks: list[Check] = []
    for path, token in tokens.items():
        if not token:
            continue
        validated, tampered = await asyncio.gather(
            validate_token(client, token),
            validate_token(client, tamper_token(token)),
        )
        checks.append(Check("validate", path, expected=True, actual=validated == path))
        checks.append(Check("tampered", path, expected=False, actual=tampered is not None))
    return checks


async def run_smoke(*, base_url: str, account_type: str = "individual", timeout_s: float = 20.0) -> int:
    await wait_for_health(base_url, timeout_s=timeout_s)
    paths = [p.value for p in ReturnPath] + [REFUSED_PATH]

    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        issued = await asyncio.gather(*(issue_token(client, p) for p in paths))
        tokens = dict(zip(paths, issued))

        checks = [
            Check("issue", p, expected=p != REFUSED_PATH, actual=bool(tok))
            for p, tok in tokens.items()
        ]
        checks.extend(await _check_tokens(client, tokens))

        review_token = tokens.get(ReturnPath.reviews_write.value) or None
        with_token = await resolve_redirect(client, review_token, account_type)
        checks.append(
            Check(
                "redirect_with_token",
                ReturnPath.reviews_write.value,
                expected=True,
                actual=with_token["redirect_to"] == ReturnPath.reviews_write.value,
                detail=with_token["redirect_to"],
            )
        )
        without_token = await resolve_redirect(client, None, account_type)
        checks.append(
            Check(
                "redirect_default",
                without_token["redirect_to"],
                expected=False,
                actual=without_token["from_token"],
            )
        )

    summary, exit_code = summarize(checks)
    logger.info("runner.summary", extra=summary)
    return exit_code


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    code = asyncio.run(
        run_smoke(
            base_url=args.base_url,
            account_type=args.account_type,
            timeout_s=args.timeout,
        )
    )
    raise SystemExit(code)


if __name__ == "__main__":
    main()
