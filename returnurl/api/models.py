from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..domain.paths import AccountType


class ReturnUrlIssueRequest(BaseModel):
    """Destination to mint a return token for."""
    path: str = Field(..., min_length=1)


class ReturnUrlIssueResponse(BaseModel):
    """A freshly issued return token and its lifetime (epoch ms)."""
    token: str
    path: str
    issued_at: int
    expires_at: int


class ReturnUrlValidateResponse(BaseModel):
    """Outcome of checking a token; no reason is given on failure."""
    valid: bool
    path: Optional[str] = None


class SignUpUrlResponse(BaseModel):
    url: str


class RedirectRequest(BaseModel):
    """Inputs for choosing where a user lands after signing in."""
    token: Optional[str] = None
    account_type: AccountType


class RedirectResponse(BaseModel):
    redirect_to: str
    from_token: bool


class VerifiedRedirectRequest(BaseModel):
    """Inputs for choosing where a user goes once their e-mail is verified."""
    token: Optional[str] = None
    email: str = Field(..., min_length=3)
