from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import time
from collections.abc import Callable, Iterable

from pydantic import BaseModel, Field

from ..logging_conf import get_logger
from .paths import ReturnPath, allow_list, is_allowed

__all__ = [
    "VALIDITY_MS",
    "TokenPayload",
    "TokenError",
    "MalformedTokenError",
    "BadSignatureError",
    "ExpiredTokenError",
    "DisallowedPathError",
    "now_ms",
    "sign",
    "ReturnUrlSigner",
]

VALIDITY_MS = 3_600_000

logger = get_logger("domain.tokens")


# ------------------------
# Errors
# ------------------------
class TokenError(ValueError):
    """Base class for return-URL token failures.

    These never leave `ReturnUrlSigner.validate`; the `code` only feeds
    server-side logs.
    """

    code: str = "invalid_token"


class MalformedTokenError(TokenError):
    code = "malformed_token"


class BadSignatureError(TokenError):
    code = "bad_signature"


class ExpiredTokenError(TokenError):
    code = "expired_token"


class DisallowedPathError(TokenError):
    code = "path_not_allowed"


# ------------------------
# Schema
# ------------------------
class TokenPayload(BaseModel):
    """Decoded, verified contents of a return-URL token."""

    path: str = Field(..., min_length=1)
    issued_at_ms: int = Field(..., ge=0)
    signature: str = Field(..., min_length=1)

    def expires_at_ms(self, validity_ms: int = VALIDITY_MS) -> int:
        return self.issued_at_ms + validity_ms


# ------------------------
# Internals
# ------------------------

def now_ms() -> int:
    """Return current time in epoch milliseconds."""
    return int(time.time() * 1000)


def sign(secret: str, path: str, issued_at_ms: int | str) -> str:
    """HMAC-SHA256 over `path:issued_at_ms`, as lowercase hex."""
    data = f"{path}:{issued_at_ms}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), data, hashlib.sha256).hexdigest()


def _b64url_encode(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def _b64url_decode(token: str) -> str:
    padded = token + ("=" * (-len(token) % 4))
    # validate=True rejects characters outside the alphabet instead of dropping them
    raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    return raw.decode("utf-8")


def _split_fields(text: str) -> tuple[str, str, str]:
    # Parse from the right: the timestamp and hex signature never contain ':'
    parts = text.rsplit(":", 2)
    if len(parts) != 3 or not all(parts):
        raise MalformedTokenError("Token must carry path, timestamp and signature")
    path, ts, signature = parts
    return path, ts, signature


# ------------------------
# Signer
# ------------------------

class ReturnUrlSigner:
    """Issue and verify signed, expiring return-URL tokens.

    Token layout (before base64url without padding)::

        <path>:<issued_at_ms>:<hex hmac-sha256 of "<path>:<issued_at_ms>">

    The secret, allow-list and clock are fixed at construction.
    """

    def __init__(
        self,
        secret: str,
        allowed_paths: Iterable[str] | None = None,
        *,
        validity_ms: int = VALIDITY_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        if not secret:
            raise ValueError("secret must be a non-empty string")
        if validity_ms <= 0:
            raise ValueError("validity_ms must be positive")
        self._secret = secret
        self.allowed_paths = allow_list(allowed_paths)
        self.validity_ms = validity_ms
        self._clock = clock

    def issue(self, path: str) -> str:
        """Return a token for `path`, or "" when `path` is not allow-listed."""
        if isinstance(path, ReturnPath):
            path = path.value
        if not is_allowed(path, self.allowed_paths):
            return ""
        issued_at = self._clock()
        signature = sign(self._secret, path, issued_at)
        return _b64url_encode(f"{path}:{issued_at}:{signature}")

    def decode(self, token: str) -> TokenPayload:
        """Decode and fully verify `token`.

        Raises a specific `TokenError` subclass on the first failed check.
        """
        if not isinstance(token, str) or not token:
            raise MalformedTokenError("Token is empty")
        try:
            text = _b64url_decode(token)
        except (binascii.Error, UnicodeError, ValueError) as e:
            raise MalformedTokenError("Token is not valid base64url") from e

        path, ts, signature = _split_fields(text)
        if not (ts.isascii() and ts.isdigit()):
            raise MalformedTokenError("Token timestamp is not an integer")
        # Sign the timestamp text exactly as carried in the token
        expected = sign(self._secret, path, ts)
        if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii")):
            raise BadSignatureError("Token signature does not match")

        issued_at = int(ts)
        if self._clock() - issued_at > self.validity_ms:
            raise ExpiredTokenError("Token is older than the validity window")
        if not is_allowed(path, self.allowed_paths):
            raise DisallowedPathError("Token path is no longer allowed")
        return TokenPayload(path=path, issued_at_ms=issued_at, signature=signature)

    def validate(self, token: str) -> str | None:
        """Return the token's path if it is valid, otherwise None.

        Every failure collapses to None so callers cannot tell why.
        """
        try:
            return self.decode(token).path
        except TokenError as e:
            logger.debug(
                "token.rejected",
                extra={"event": "token_rejected", "reason": e.code},
            )
            return None
