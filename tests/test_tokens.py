from __future__ import annotations

import base64
import logging
import random
import string

import pytest

from returnurl.domain.paths import ReturnPath
from returnurl.domain.tokens import (
    VALIDITY_MS,
    BadSignatureError,
    DisallowedPathError,
    ExpiredTokenError,
    MalformedTokenError,
    ReturnUrlSigner,
    sign,
)

from .conftest import SECRET, T0


def _encode(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def _decode(token: str) -> str:
    return base64.urlsafe_b64decode(token + "=" * (-len(token) % 4)).decode("utf-8")


@pytest.mark.parametrize("path", [p.value for p in ReturnPath])
def test_issue_then_validate_returns_path(signer, path):
    token = signer.issue(path)
    assert token
    assert signer.validate(token) == path


@pytest.mark.parametrize("path", ["/not-allowed", "", "/dashboard/", "/DASHBOARD", "dashboard"])
def test_issue_refuses_paths_outside_allow_list(signer, path):
    assert signer.issue(path) == ""


def test_dashboard_scenario(signer):
    t = signer.issue("/dashboard")
    assert signer.validate(t) == "/dashboard"
    assert signer.issue("/not-allowed") == ""
    assert signer.validate("") is None


def test_token_layout(signer):
    token = signer.issue("/dashboard")
    assert "=" not in token
    assert "+" not in token and "/" not in token
    assert _decode(token) == f"/dashboard:{T0}:{sign(SECRET, '/dashboard', T0)}"


def test_issue_is_deterministic_for_fixed_clock(signer):
    assert signer.issue("/dashboard") == signer.issue("/dashboard")


def test_tokens_differ_across_milliseconds_and_both_validate(signer, clock):
    first = signer.issue("/reviews/write")
    clock.advance(1)
    second = signer.issue("/reviews/write")
    assert first != second
    assert signer.validate(first) == "/reviews/write"
    assert signer.validate(second) == "/reviews/write"


@pytest.mark.parametrize(
    "token",
    [
        "",
        "not-base64!!",
        _encode("onlyonefield"),
        _encode("/dashboard:123"),
        _encode("/dashboard::abc"),
        _encode(":123:abc"),
        _encode("/dashboard:123:"),
        _encode("/dashboard:12x:abc"),
        "ü",
        "abcde",
    ],
)
def test_validate_rejects_malformed_tokens(signer, token):
    assert signer.validate(token) is None


def test_validate_rejects_non_string(signer):
    assert signer.validate(None) is None  # type: ignore[arg-type]


def test_tampering_any_payload_character_is_rejected(signer):
    token = signer.issue("/dashboard/expenses")
    path, ts, signature = _decode(token).rsplit(":", 2)
    payload = f"{path}:{ts}"
    for i, ch in enumerate(payload):
        if ch == ":":
            continue
        if ch.isdigit():
            swapped = "8" if ch == "7" else "7"
        else:
            swapped = "y" if ch == "x" else "x"
        forged = payload[:i] + swapped + payload[i + 1 :]
        assert signer.validate(_encode(f"{forged}:{signature}")) is None, forged


def test_tampered_signature_is_rejected(signer):
    path, ts, signature = _decode(signer.issue("/dashboard")).rsplit(":", 2)
    flipped = ("0" if signature[0] != "0" else "1") + signature[1:]
    assert signer.validate(_encode(f"{path}:{ts}:{flipped}")) is None


def test_non_ascii_signature_is_rejected(signer):
    assert signer.validate(_encode(f"/dashboard:{T0}:é")) is None


def test_uppercase_hex_signature_is_rejected(signer):
    sig = sign(SECRET, "/dashboard", T0).upper()
    assert signer.validate(_encode(f"/dashboard:{T0}:{sig}")) is None


def test_leading_zero_timestamp_is_signed_as_written(signer):
    ts = f"0{T0}"
    token = _encode(f"/dashboard:{ts}:{sign(SECRET, '/dashboard', T0)}")
    assert signer.validate(token) is None


def test_expiry_boundary(signer, clock):
    token = signer.issue("/dashboard")
    clock.now = T0 + 3_599_999
    assert signer.validate(token) == "/dashboard"
    clock.now = T0 + VALIDITY_MS
    assert signer.validate(token) == "/dashboard"
    clock.now = T0 + 3_600_001
    assert signer.validate(token) is None


def test_custom_validity_window(clock):
    short = ReturnUrlSigner(SECRET, validity_ms=1000, clock=clock)
    token = short.issue("/dashboard")
    clock.advance(1001)
    assert short.validate(token) is None


def test_token_from_other_secret_is_rejected(signer, clock):
    other = ReturnUrlSigner("another-secret", clock=clock)
    assert signer.validate(other.issue("/dashboard")) is None


def test_path_removed_from_allow_list_is_rejected(signer, clock):
    token = signer.issue("/reviews/write")
    narrowed = ReturnUrlSigner(SECRET, ["/dashboard"], clock=clock)
    assert narrowed.validate(token) is None
    assert narrowed.validate(signer.issue("/dashboard")) == "/dashboard"


def test_custom_allow_list(clock):
    s = ReturnUrlSigner(SECRET, ["/reports", ReturnPath.dashboard], clock=clock)
    assert s.validate(s.issue("/reports")) == "/reports"
    assert s.validate(s.issue("/dashboard")) == "/dashboard"
    assert s.issue("/reviews/write") == ""


def test_path_containing_colon_round_trips(clock):
    s = ReturnUrlSigner(SECRET, ["/invoices:draft"], clock=clock)
    token = s.issue("/invoices:draft")
    assert s.validate(token) == "/invoices:draft"


def test_decode_reports_specific_errors(signer, clock):
    with pytest.raises(MalformedTokenError):
        signer.decode("not-base64!!")
    with pytest.raises(BadSignatureError):
        signer.decode(_encode(f"/dashboard:{T0}:deadbeef"))

    token = signer.issue("/dashboard")
    payload = signer.decode(token)
    assert payload.path == "/dashboard"
    assert payload.issued_at_ms == T0
    assert payload.expires_at_ms() == T0 + VALIDITY_MS

    narrowed = ReturnUrlSigner(SECRET, ["/reviews/write"], clock=clock)
    with pytest.raises(DisallowedPathError):
        narrowed.decode(token)

    clock.advance(VALIDITY_MS + 1)
    with pytest.raises(ExpiredTokenError):
        signer.decode(token)


def test_rejection_reason_only_reaches_debug_log(signer, clock, caplog):
    token = signer.issue("/dashboard")
    clock.advance(VALIDITY_MS + 1)
    with caplog.at_level(logging.DEBUG, logger="domain.tokens"):
        assert signer.validate(token) is None
    reasons = [getattr(r, "reason", None) for r in caplog.records]
    assert "expired_token" in reasons


@pytest.mark.parametrize("kwargs", [{"secret": ""}, {"secret": SECRET, "validity_ms": 0}])
def test_signer_rejects_bad_construction(kwargs):
    with pytest.raises(ValueError):
        ReturnUrlSigner(**kwargs)


def test_allow_list_rejects_relative_entries():
    with pytest.raises(ValueError):
        ReturnUrlSigner(SECRET, ["dashboard"])


def _random_inputs(count: int = 200) -> list[str]:
    rng = random.Random(1234)
    alphabet = string.ascii_letters + string.digits + "-_=+/:!%é\x00 "
    out: list[str] = []
    for _ in range(count):
        n = rng.randint(0, 80)
        out.append("".join(rng.choice(alphabet) for _ in range(n)))
        raw = bytes(rng.getrandbits(8) for _ in range(n))
        out.append(base64.urlsafe_b64encode(raw).decode("ascii").rstrip("="))
        fields = [bytes(rng.getrandbits(8) for _ in range(rng.randint(0, 12))) for _ in range(3)]
        colons = b":".join(fields)
        out.append(base64.urlsafe_b64encode(colons).decode("ascii").rstrip("="))
    return out


@pytest.mark.parametrize("token", _random_inputs())
def test_validate_never_raises_on_arbitrary_input(signer, token):
    assert signer.validate(token) is None
