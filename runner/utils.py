from __future__ import annotations

import base64

from runner.types import Check


def tamper_token(token: str) -> str:
    """Bump the last digit of the embedded timestamp and re-encode.

    The result is still well-formed base64url with three fields, so only
    the signature check can reject it.
    """
    padded = token + ("=" * (-len(token) % 4))
    text = base64.urlsafe_b64decode(padded).decode("utf-8")
    path, ts, signature = text.rsplit(":", 2)
    ts = ts[:-1] + str((int(ts[-1]) + 1) % 10)
    raw = f"{path}:{ts}:{signature}".encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def summarize(checks: list[Check]) -> tuple[dict, int]:
    """Compute a summary dict and an exit code from the checks."""
    failures = [
        {
            "name": c.name,
            "path": c.path,
            "expected": c.expected,
            "actual": c.actual,
            "detail": c.detail,
        }
        for c in checks
        if not c.passed
    ]
    per_check: dict[str, dict[str, int]] = {}
    for c in checks:
        per_check.setdefault(c.name, {"passed": 0, "failed": 0})
        per_check[c.name]["passed" if c.passed else "failed"] += 1

    summary = {
        "component": "runner",
        "event": "summary",
        "checks": len(checks),
        "passed": len(checks) - len(failures),
        "failed": len(failures),
        "per_check": per_check,
        "failures": failures,
    }
    exit_code = 0 if (checks and not failures) else 1
    return summary, exit_code
