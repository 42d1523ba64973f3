"""
Session API routes.

This module provides REST endpoints for:
- Login
- Logout
- Access token refresh
- Session keep-alive
"""

import logging

from fastapi import APIRouter, Request, Response, status

from user_service.api.cookies import (
    expire_cookies,
    set_access_token_cookies,
    set_session_token_cookie,
)
from user_service.api.dependencies import SessionServiceDep, cookie, query_param
from user_service.domain.parameter_keys import (
    PASSWORD_KEY,
    SESSION_TOKEN_KEY,
    USERNAME_KEY,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sessions"])


@router.post(
    "/sessions",
    status_code=status.HTTP_201_CREATED,
    summary="Log in",
    description="""
    Create a session for the user whose `username` and `password` are given
    as query parameters.

    Sets the `session-token`, `access-token` and `access-token-expiry`
    cookies.
    """,
)
async def create_session(request: Request, session_service: SessionServiceDep) -> Response:
    session_token, access_token = await session_service.create_session(
        query_param(request, USERNAME_KEY),
        query_param(request, PASSWORD_KEY),
    )

    response = Response(status_code=status.HTTP_201_CREATED)
    set_session_token_cookie(response, session_token)
    set_access_token_cookies(response, access_token)
    return response


@router.delete("/session", summary="Log out")
async def delete_session(request: Request, session_service: SessionServiceDep) -> Response:
    """Delete the session named by the session cookie and clear all cookies."""
    await session_service.delete_session(cookie(request, SESSION_TOKEN_KEY))

    response = Response(status_code=status.HTTP_200_OK)
    expire_cookies(response)
    return response


@router.get("/session/access-token", summary="Refresh access token")
async def get_access_token(request: Request, session_service: SessionServiceDep) -> Response:
    """
    Issue a new access token for the session cookie's owner.

    Also pushes the session's expiry forward.
    """
    session_token, access_token = await session_service.get_access_token(
        cookie(request, SESSION_TOKEN_KEY)
    )

    response = Response(status_code=status.HTTP_200_OK)
    set_session_token_cookie(response, session_token)
    set_access_token_cookies(response, access_token)
    return response


@router.post("/session/keep-alive", summary="Keep session alive")
async def keep_session_alive(
    request: Request, session_service: SessionServiceDep
) -> Response:
    await session_service.keep_session_alive(cookie(request, SESSION_TOKEN_KEY))
    return Response(status_code=status.HTTP_200_OK)
