"""
Session service for login, logout and session renewal.

This module provides:
- Session creation (login) with session token collision handling
- Session deletion (logout)
- Access token refresh, which also extends the session
- Session keep-alive
- Identity lookup for other services
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from user_service.core.config import Settings
from user_service.domain.parameter_keys import PASSWORD_KEY, USERNAME_KEY
from user_service.domain.value_objects import (
    AccessToken,
    Password,
    SessionToken,
    UserIdentity,
    Username,
)
from user_service.exceptions import InvalidCredentialsError, InvalidSessionError
from user_service.ports import SessionStore
from user_service.services.params import (
    collect,
    parse_session_token,
    raise_if_invalid,
)
from user_service.services.tokens import issue_access_token

logger = logging.getLogger(__name__)


class SessionService:
    """
    Service class for session lifecycle operations.

    A session is the long-lived, server-side record of a login. Every
    operation here that touches an existing session fails with
    InvalidSessionError when the token is missing, malformed, unknown or
    expired, without saying which.
    """

    def __init__(self, settings: Settings, store: SessionStore):
        """
        Initialize SessionService.

        Args:
            settings: Application settings
            store: Session store
        """
        self.settings = settings
        self.store = store

    def _session_expiry(self) -> datetime:
        return datetime.now(UTC) + timedelta(milliseconds=self.settings.session_expire_millis)

    async def create_session(
        self, raw_username: Any, raw_password: Any
    ) -> tuple[SessionToken, AccessToken]:
        """
        Log a user in.

        This method:
        1. Parses the username and password
        2. Checks the password against the stored hash
        3. Creates a session under a fresh session token
        4. Signs an access token for the user

        Args:
            raw_username: Username as supplied by the client
            raw_password: Password as supplied by the client

        Returns:
            Tuple of (SessionToken, AccessToken)

        Raises:
            InvalidParametersError: If the username or password is missing
                or not a string
            InvalidCredentialsError: If no user has the username or the
                password does not match; both cases look the same
        """
        invalid_params: dict[str, str] = {}
        username = collect(invalid_params, USERNAME_KEY, Username.parse, raw_username)
        password = collect(invalid_params, PASSWORD_KEY, Password.parse, raw_password)
        raise_if_invalid(invalid_params)

        password_hash = await self.store.fetch_password_hash_from_username(username)
        if password_hash is None:
            logger.warning(f"Login failed: unknown username {username}")
            raise InvalidCredentialsError()

        if not await password_hash.is_match(password):
            logger.warning(f"Login failed: incorrect password for {username}")
            raise InvalidCredentialsError()

        session_token = await self._create_user_session(username)
        access_token = await issue_access_token(self.store, self.settings, session_token)

        logger.info(f"User logged in: {username}")

        return session_token, access_token

    async def _create_user_session(self, username: Username) -> SessionToken:
        """
        Store a session under a freshly minted token.

        A duplicate token is the only error retried; the next attempt uses
        a new token. Anything else propagates.
        """
        while True:
            session_token = SessionToken.create()
            try:
                await self.store.create_user_session(
                    session_token, username, self._session_expiry()
                )
            except Exception as e:
                if not self.store.is_unique_constraint_violated(e):
                    raise
                logger.warning("Session token collision, retrying with a new token")
                continue

            return session_token

    async def delete_session(self, raw_session_token: Any) -> None:
        """
        Log out by deleting the session.

        Raises:
            InvalidSessionError: If the session is not live
        """
        session_token = parse_session_token(raw_session_token)

        if not await self.store.delete_user_session(session_token):
            logger.warning("Logout failed: invalid session")
            raise InvalidSessionError()

        logger.info("Session deleted")

    async def get_access_token(
        self, raw_session_token: Any
    ) -> tuple[SessionToken, AccessToken]:
        """
        Extend a session and sign a new access token for its owner.

        Returns:
            Tuple of (SessionToken, AccessToken)

        Raises:
            InvalidSessionError: If the session is not live
        """
        session_token = await self._extend_session(raw_session_token)
        access_token = await issue_access_token(self.store, self.settings, session_token)

        return session_token, access_token

    async def keep_session_alive(self, raw_session_token: Any) -> None:
        """
        Extend a session without issuing a new access token.

        Raises:
            InvalidSessionError: If the session is not live
        """
        await self._extend_session(raw_session_token)

    async def _extend_session(self, raw_session_token: Any) -> SessionToken:
        session_token = parse_session_token(raw_session_token)

        if not await self.store.update_user_session_expiry(
            session_token, self._session_expiry()
        ):
            logger.warning("Session extension failed: invalid session")
            raise InvalidSessionError()

        return session_token

    async def get_user_identity(
        self, raw_query_session_token: Any, raw_cookie_session_token: Any
    ) -> UserIdentity:
        """
        Look up the identity of a session's owner.

        The session token is taken from the query string first. If that one
        is missing, malformed or not live, the cookie is tried instead.

        Raises:
            InvalidSessionError: If neither source names a live session
        """
        for raw_session_token in (raw_query_session_token, raw_cookie_session_token):
            try:
                session_token = parse_session_token(raw_session_token)
            except InvalidSessionError:
                continue

            user_identity = await self.store.fetch_user_identity_from_session_token(
                session_token
            )
            if user_identity is not None:
                return user_identity

        logger.warning("Identity lookup failed: invalid session")
        raise InvalidSessionError()
