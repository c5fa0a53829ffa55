from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from ..logging_conf import get_logger
from ..service import return_url_service
from .models import (
    RedirectRequest,
    RedirectResponse,
    ReturnUrlIssueRequest,
    ReturnUrlIssueResponse,
    ReturnUrlValidateResponse,
    SignUpUrlResponse,
    VerifiedRedirectRequest,
)

router = APIRouter()
logger = get_logger("api")


@router.post(
    "/return_urls",
    response_model=ReturnUrlIssueResponse,
    summary="Issue a signed return-URL token",
)
async def issue_return_url(req: ReturnUrlIssueRequest) -> ReturnUrlIssueResponse:
    """Mint a token that brings the user back to an allow-listed page."""
    try:
        out = return_url_service.issue_return_url(path=req.path)
    except ValueError as e:
        if str(e) == "path_not_allowed":
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={
                    "error_code": "path_not_allowed",
                    "error_message": "path is not an allowed return destination",
                },
            )
        raise
    return ReturnUrlIssueResponse(**out)


@router.get(
    "/return_urls/validate",
    response_model=ReturnUrlValidateResponse,
    summary="Validate a return-URL token",
)
async def validate_return_url(
    token: str = Query("", description="Token as received in ?return="),
) -> ReturnUrlValidateResponse:
    """Return the token's destination, or valid=false for any bad token."""
    out = return_url_service.validate_return_url(token=token)
    return ReturnUrlValidateResponse(**out)


@router.get(
    "/sign_up_url",
    response_model=SignUpUrlResponse,
    summary="Sign-up link that returns to a page afterwards",
)
async def sign_up_url(path: str = Query(...)) -> SignUpUrlResponse:
    out = return_url_service.build_sign_up_url(path=path)
    return SignUpUrlResponse(**out)


@router.post(
    "/auth/redirect",
    response_model=RedirectResponse,
    summary="Resolve the post sign-in destination",
)
async def resolve_redirect(req: RedirectRequest) -> RedirectResponse:
    """Honour a valid return token, else the account type's landing page."""
    out = return_url_service.resolve_redirect(token=req.token, account_type=req.account_type)
    return RedirectResponse(**out)


@router.post(
    "/auth/verify_email/redirect",
    response_model=RedirectResponse,
    summary="Resolve the destination after e-mail verification",
)
async def resolve_verification_redirect(req: VerifiedRedirectRequest) -> RedirectResponse:
    """Honour a valid return token, else sign-in with the address pre-filled."""
    out = return_url_service.resolve_verification_redirect(token=req.token, email=req.email)
    return RedirectResponse(**out)
