from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

__all__ = [
    "ReturnPath",
    "AccountType",
    "DEFAULT_ALLOWED_PATHS",
    "allow_list",
    "is_allowed",
]


class ReturnPath(str, Enum):
    """Destinations a return-URL token may point back to."""

    reviews_write = "/reviews/write"
    dashboard = "/dashboard"
    dashboard_expenses = "/dashboard/expenses"


class AccountType(str, Enum):
    company = "company"
    individual = "individual"
    business = "business"


DEFAULT_ALLOWED_PATHS: frozenset[str] = frozenset(p.value for p in ReturnPath)


def allow_list(paths: Iterable[str] | None = None) -> frozenset[str]:
    """Build an immutable allow-list, defaulting to every `ReturnPath`.

    Raises:
        ValueError: if an entry is empty or not application-relative.
    """
    if paths is None:
        return DEFAULT_ALLOWED_PATHS
    out: set[str] = set()
    for p in paths:
        value = p.value if isinstance(p, ReturnPath) else p
        if not isinstance(value, str) or not value.startswith("/"):
            raise ValueError(f"allowed path must start with '/': {value!r}")
        out.add(value)
    return frozenset(out)


def is_allowed(path: object, allowed: frozenset[str]) -> bool:
    """Exact-match membership; no normalization is applied."""
    return isinstance(path, str) and path in allowed
