import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response

from config import Settings, get_settings
from schemas import SessionClaims, SessionIdentity, SuccessResponse
from tokens import TokenCodec, TokenError, TokenExpired

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

COOKIE_NAME = "token"

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_token_codec(settings: SettingsDep) -> TokenCodec:
    return TokenCodec(settings.access_token_secret, settings.token_ttl_seconds)


TokenCodecDep = Annotated[TokenCodec, Depends(get_token_codec)]


def get_current_identity(
    request: Request,
    codec: TokenCodecDep,
    token: Optional[str] = Cookie(default=None, alias=COOKIE_NAME),
) -> SessionIdentity:
    """
    Reads the 'token' cookie, verifies it and returns the caller's identity.
    Raises 401 without a cookie and 403 when the token is rejected.
    """
    if token is None:
        raise HTTPException(status_code=401, detail="Unauthorized access")

    try:
        claims = codec.verify(token)
    except TokenExpired:
        logger.info("Rejected expired session token")
        raise HTTPException(status_code=403, detail="Forbidden access")
    except TokenError as exc:
        logger.warning("Rejected invalid session token: %s", exc)
        raise HTTPException(status_code=403, detail="Forbidden access")

    identity = SessionIdentity(**claims)
    request.state.identity = identity
    return identity


CurrentIdentityDep = Annotated[SessionIdentity, Depends(get_current_identity)]


@router.post("/jwt", response_model=SuccessResponse)
def issue_token(
    claims: SessionClaims,
    response: Response,
    settings: SettingsDep,
    codec: TokenCodecDep,
):
    """
    Sign the submitted identity claims and store them in the session cookie.
    """
    token = codec.issue(claims.model_dump())
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=settings.token_ttl_seconds,
        **settings.cookie_options(),
    )
    logger.info("Issued session token for %s", claims.email)
    return SuccessResponse()


@router.post("/logout", response_model=SuccessResponse)
def logout(response: Response, settings: SettingsDep):
    """
    Clear the session cookie. Tokens stay valid until they expire.
    """
    response.delete_cookie(COOKIE_NAME, **settings.cookie_options())
    return SuccessResponse()
