from __future__ import annotations

from ..config import build_signer
from ..domain.paths import AccountType
from ..domain.redirects import (
    resolve_post_auth_redirect,
    resolve_post_verification_redirect,
    sign_up_url,
)
from ..logging_conf import get_logger

logger = get_logger("service.return_urls")


# ------------------------
# Use-cases
# ------------------------

def issue_return_url(*, path: str) -> dict:
    """Issue a return token for an allow-listed path.

    Raises:
        ValueError: "path_not_allowed" when the signer refuses the path.
    """
    signer = build_signer()
    token = signer.issue(path)
    if not token:
        logger.info("return_url.refused", extra={"event": "return_url_refused", "path": path})
        raise ValueError("path_not_allowed")

    payload = signer.decode(token)
    logger.info(
        "return_url.issue",
        extra={"event": "return_url_issue", "path": path, "token": token},
    )
    return {
        "token": token,
        "path": payload.path,
        "issued_at": payload.issued_at_ms,
        "expires_at": payload.expires_at_ms(signer.validity_ms),
    }


def validate_return_url(*, token: str) -> dict:
    """Report whether a token is valid; failures carry no reason."""
    path = build_signer().validate(token)
    logger.info(
        "return_url.validate",
        extra={"event": "return_url_validate", "valid": path is not None, "token": token},
    )
    return {"valid": path is not None, "path": path}


def build_sign_up_url(*, path: str) -> dict:
    url = sign_up_url(path, build_signer())
    logger.info("sign_up_url.build", extra={"event": "sign_up_url_build", "path": path})
    return {"url": url}


def resolve_redirect(*, token: str | None, account_type: AccountType) -> dict:
    """Destination after sign-in."""
    redirect_to, from_token = resolve_post_auth_redirect(token, account_type, build_signer())
    logger.info(
        "redirect.resolve",
        extra={
            "event": "redirect_resolve",
            "account_type": AccountType(account_type).value,
            "redirect_to": redirect_to,
            "from_token": from_token,
        },
    )
    return {"redirect_to": redirect_to, "from_token": from_token}


def resolve_verification_redirect(*, token: str | None, email: str) -> dict:
    """Destination after e-mail verification, before the user has signed in."""
    redirect_to, from_token = resolve_post_verification_redirect(token, email, build_signer())
    logger.info(
        "redirect.verified",
        extra={"event": "redirect_verified", "from_token": from_token},
    )
    return {"redirect_to": redirect_to, "from_token": from_token}
