from __future__ import annotations

from urllib.parse import quote

from .paths import AccountType, ReturnPath
from .tokens import ReturnUrlSigner

__all__ = [
    "SIGN_UP_PATH",
    "sign_up_url",
    "default_landing_path",
    "resolve_post_auth_redirect",
    "resolve_post_verification_redirect",
]

SIGN_UP_PATH = "/sign-up"
SIGN_IN_PATH = "/sign-in"


def sign_up_url(path: str, signer: ReturnUrlSigner) -> str:
    """Where to send an anonymous visitor of `path`.

    Carries a return token in `?return=` when one can be issued.
    """
    token = signer.issue(path)
    if not token:
        return SIGN_UP_PATH
    return f"{SIGN_UP_PATH}?return={quote(token, safe='')}"


def default_landing_path(account_type: AccountType | str) -> str:
    """Individuals land on their expenses; companies and businesses on the dashboard."""
    if AccountType(account_type) is AccountType.individual:
        return ReturnPath.dashboard_expenses.value
    return ReturnPath.dashboard.value


def resolve_post_auth_redirect(
    token: str | None, account_type: AccountType | str, signer: ReturnUrlSigner
) -> tuple[str, bool]:
    """Pick the destination after sign-in.

    Returns `(path, from_token)`; an invalid or missing token falls back to
    the account type's landing page without saying why.
    """
    if token:
        path = signer.validate(token)
        if path is not None:
            return path, True
    return default_landing_path(account_type), False


def resolve_post_verification_redirect(
    token: str | None, email: str, signer: ReturnUrlSigner
) -> tuple[str, bool]:
    """Pick the destination once an e-mail address is verified.

    The user is not signed in yet, so without a valid token they go to the
    sign-in page with the address pre-filled.
    """
    if token:
        path = signer.validate(token)
        if path is not None:
            return path, True
    return f"{SIGN_IN_PATH}?email={quote(email.strip(), safe='')}&verified=true", False
