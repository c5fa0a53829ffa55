from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Check:
    """Outcome of one smoke check against the server."""

    name: str
    path: str
    expected: bool
    actual: bool
    detail: str | None = None

    @property
    def passed(self) -> bool:
        return self.expected == self.actual


class SmokeError(RuntimeError):
    """Raised when the smoke flow cannot proceed (e.g., health never ready)."""


class IssueError(SmokeError):
    """Raised when the server answers an issue request unexpectedly."""


class ValidateError(SmokeError):
    """Raised when validating a token fails repeatedly at the HTTP level."""
