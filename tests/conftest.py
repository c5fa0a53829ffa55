from __future__ import annotations

import pytest

from returnurl.domain.tokens import ReturnUrlSigner

SECRET = "test-secret"
T0 = 1_700_000_000_000


class FakeClock:
    """Epoch-ms clock the tests move by hand."""

    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def signer(clock: FakeClock) -> ReturnUrlSigner:
    return ReturnUrlSigner(SECRET, clock=clock)


@pytest.fixture
def secret_env(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setenv("RETURN_URL_SECRET", SECRET)
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("RETURN_URL_VALIDITY_MS", raising=False)
    return SECRET


@pytest.fixture
def client(secret_env: str):
    from fastapi.testclient import TestClient

    from returnurl.main import create_app

    with TestClient(create_app()) as c:
        yield c
