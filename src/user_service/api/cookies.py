"""Writing and clearing the session and access token cookies."""

from datetime import UTC, datetime

from fastapi import Response

from user_service.domain.parameter_keys import (
    ACCESS_TOKEN_EXPIRY_KEY,
    ACCESS_TOKEN_KEY,
    SESSION_TOKEN_KEY,
)
from user_service.domain.value_objects import AccessToken, SessionToken

# Latest date a signed 32-bit timestamp can hold. Cookies outlive browser
# restarts; expiry is enforced server side.
COOKIE_EXPIRY = datetime.fromtimestamp(2**31 - 1, UTC)


def set_session_token_cookie(response: Response, session_token: SessionToken) -> None:
    response.set_cookie(
        SESSION_TOKEN_KEY,
        session_token.value,
        expires=COOKIE_EXPIRY,
        httponly=True,
        samesite="strict",
    )


def set_access_token_cookies(response: Response, access_token: AccessToken) -> None:
    """
    Add the access token and its expiry as cookies.

    The expiry cookie is readable by scripts so clients know when to
    refresh.
    """
    response.set_cookie(
        ACCESS_TOKEN_KEY,
        access_token.token,
        expires=COOKIE_EXPIRY,
        httponly=True,
        samesite="strict",
    )
    response.set_cookie(
        ACCESS_TOKEN_EXPIRY_KEY,
        access_token.expiry.isoformat(),
        expires=COOKIE_EXPIRY,
        samesite="strict",
    )


def expire_cookies(response: Response) -> None:
    """Tell the client to drop all authentication cookies."""
    response.delete_cookie(SESSION_TOKEN_KEY, httponly=True, samesite="strict")
    response.delete_cookie(ACCESS_TOKEN_KEY, httponly=True, samesite="strict")
    response.delete_cookie(ACCESS_TOKEN_EXPIRY_KEY, samesite="strict")
