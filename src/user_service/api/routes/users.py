"""
User API routes.

This module provides REST endpoints for:
- Registration
- Reading and updating the caller's profile
- Changing the caller's password
- Deleting the caller's account
- Identity lookup by session token
- Role changes (admin only)
- Username lookup by user ID
"""

import logging
from typing import Any

from fastapi import APIRouter, Request, Response, status

from user_service.api.cookies import expire_cookies, set_access_token_cookies
from user_service.api.dependencies import (
    SessionServiceDep,
    UserServiceDep,
    cookie,
    query_param,
)
from user_service.domain.parameter_keys import (
    ACCESS_TOKEN_KEY,
    EMAIL_ADDRESS_KEY,
    NEW_PASSWORD_KEY,
    PASSWORD_KEY,
    SESSION_TOKEN_KEY,
    USER_IDS_KEY,
    USER_ROLE_KEY,
    USERNAME_KEY,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


@router.post(
    "/users",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Register a new user from the `username`, `email-address` and `password`
    query parameters.

    **Password Requirements:**
    - 8 to 255 characters
    - Only letters, digits and `!@#$%^&*`
    - At least 1 uppercase letter
    - At least 1 lowercase letter
    - At least 1 digit
    - At least 1 special character

    Responds 400 with a map of every invalid or taken field.
    """,
)
async def create_user(request: Request, user_service: UserServiceDep) -> Response:
    await user_service.create_user(
        query_param(request, USERNAME_KEY),
        query_param(request, EMAIL_ADDRESS_KEY),
        query_param(request, PASSWORD_KEY),
    )
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/user/profile", summary="Get current user's profile")
async def get_user_profile(request: Request, user_service: UserServiceDep) -> dict[str, Any]:
    """Return the profile carried by the access token cookie."""
    user_profile = await user_service.get_user_profile(cookie(request, ACCESS_TOKEN_KEY))
    return user_profile.to_json()


@router.put("/user/profile", summary="Update current user's profile")
async def update_user_profile(request: Request, user_service: UserServiceDep) -> Response:
    """Change username and email address, then reissue the access token."""
    access_token = await user_service.update_user_profile(
        cookie(request, SESSION_TOKEN_KEY),
        query_param(request, USERNAME_KEY),
        query_param(request, EMAIL_ADDRESS_KEY),
    )

    response = Response(status_code=status.HTTP_200_OK)
    set_access_token_cookies(response, access_token)
    return response


@router.put("/user/password", summary="Change current user's password")
async def update_password(request: Request, user_service: UserServiceDep) -> Response:
    await user_service.update_password(
        cookie(request, SESSION_TOKEN_KEY),
        query_param(request, PASSWORD_KEY),
        query_param(request, NEW_PASSWORD_KEY),
    )
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/user", summary="Delete current user")
async def delete_user(request: Request, user_service: UserServiceDep) -> Response:
    await user_service.delete_user(
        cookie(request, SESSION_TOKEN_KEY),
        query_param(request, PASSWORD_KEY),
    )

    response = Response(status_code=status.HTTP_200_OK)
    expire_cookies(response)
    return response


@router.get("/user/identity", summary="Get identity of a session's owner")
async def get_user_identity(
    request: Request, session_service: SessionServiceDep
) -> dict[str, Any]:
    """
    Return the user ID and role of the session's owner.

    The session token is read from the `session-token` query parameter,
    falling back to the cookie.
    """
    user_identity = await session_service.get_user_identity(
        query_param(request, SESSION_TOKEN_KEY),
        cookie(request, SESSION_TOKEN_KEY),
    )
    return user_identity.to_json()


@router.put("/users/{user_id}/user-role", summary="Change a user's role")
async def update_user_role(
    user_id: str, request: Request, user_service: UserServiceDep
) -> Response:
    """Admin only. Responds 404 if the user does not exist."""
    await user_service.update_user_role(
        cookie(request, SESSION_TOKEN_KEY),
        user_id,
        query_param(request, USER_ROLE_KEY),
    )
    return Response(status_code=status.HTTP_200_OK)


@router.get("/users/all/username", summary="Look up usernames")
async def get_usernames(request: Request, user_service: UserServiceDep) -> dict[str, str]:
    """Map each user ID in the `user-ids` JSON array to its username."""
    usernames = await user_service.get_usernames(query_param(request, USER_IDS_KEY))
    return {str(user_id): str(username) for user_id, username in usernames.items()}
