"""
User service for account management.

This module provides:
- Registration
- Profile reads (from the access token) and updates
- Password changes
- Account deletion
- Role changes by admins
- Username lookup by user ID
"""

import json
import logging
from typing import Any, Optional

from argon2 import PasswordHasher
from starlette.concurrency import run_in_threadpool

from user_service.core.config import Settings
from user_service.core.security import create_password_hasher
from user_service.domain.exceptions import DomainException, InvalidValueError
from user_service.domain.parameter_keys import (
    EMAIL_ADDRESS_KEY,
    NEW_PASSWORD_KEY,
    PASSWORD_KEY,
    USER_ID_KEY,
    USER_IDS_KEY,
    USER_ROLE_KEY,
    USERNAME_KEY,
)
from user_service.domain.value_objects import (
    AccessToken,
    ClientModifiableUserProfile,
    EmailAddress,
    Password,
    PasswordHash,
    SessionToken,
    UserId,
    UserProfile,
    UserRole,
    Username,
)
from user_service.exceptions import (
    IncorrectPasswordError,
    InvalidAccessTokenError,
    InvalidParametersError,
    InvalidSessionError,
    NotAdminError,
    NotFoundError,
)
from user_service.ports import SessionStore
from user_service.services.params import (
    collect,
    parse_session_token,
    raise_if_invalid,
)
from user_service.services.tokens import issue_access_token

logger = logging.getLogger(__name__)

USERNAME_IN_USE = "Username already in use."
EMAIL_ADDRESS_IN_USE = "Email address already in use."


class UserService:
    """
    Service class for user account operations.

    Writes always authenticate through the session token against the
    store. Only get_user_profile trusts a previously issued access token.
    """

    def __init__(
        self,
        settings: Settings,
        store: SessionStore,
        password_hasher: Optional[PasswordHasher] = None,
    ):
        """
        Initialize UserService.

        Args:
            settings: Application settings
            store: Session store
            password_hasher: Argon2 hasher, built from settings if omitted
        """
        self.settings = settings
        self.store = store
        self.password_hasher = password_hasher or create_password_hasher(settings)

    async def create_user(
        self, raw_username: Any, raw_email_address: Any, raw_password: Any
    ) -> UserId:
        """
        Register a new user with the user role.

        All three fields are checked, and for each one that is well formed,
        whether it is already taken. Every failure is reported together.

        Returns:
            ID of the new user

        Raises:
            InvalidParametersError: If any field is invalid or taken
        """
        invalid_params: dict[str, str] = {}
        username = collect(
            invalid_params, USERNAME_KEY, Username.parse_and_validate, raw_username
        )
        email_address = collect(
            invalid_params,
            EMAIL_ADDRESS_KEY,
            EmailAddress.parse_and_validate,
            raw_email_address,
        )
        password = collect(
            invalid_params, PASSWORD_KEY, Password.parse_and_validate, raw_password
        )
        await self._check_availability(invalid_params, username, email_address)
        raise_if_invalid(invalid_params)

        user_profile = ClientModifiableUserProfile(
            username=username, email_address=email_address
        )
        password_hash = await PasswordHash.create(password, self.password_hasher)

        try:
            user_id = await self.store.create_user_profile_and_credential(
                user_profile, password_hash
            )
        except Exception as e:
            # Lost a race with another registration for the same values
            if self.store.is_unique_constraint_violated(e):
                await self._raise_conflicts(user_profile, None)
            raise

        logger.info(f"User registered successfully: {user_id} ({username})")

        return user_id

    async def get_user_profile(self, raw_access_token: Any) -> UserProfile:
        """
        Read the caller's profile from their access token.

        No store lookup is made; a valid signature and unexpired token are
        enough.

        Raises:
            InvalidAccessTokenError: If the token does not verify
        """
        try:
            access_token = await run_in_threadpool(
                AccessToken.verify,
                raw_access_token,
                self.settings.access_token_public_key,
            )
        except DomainException as e:
            logger.warning(f"Access token rejected: {e.message}")
            raise InvalidAccessTokenError() from e

        return access_token.user_profile

    async def update_user_profile(
        self,
        raw_session_token: Any,
        raw_username: Any,
        raw_email_address: Any,
    ) -> AccessToken:
        """
        Change the caller's username and email address.

        A user keeping their current username or email address does not
        conflict with themselves.

        Returns:
            A new access token carrying the updated profile

        Raises:
            InvalidSessionError: If the session is not live
            InvalidParametersError: If either field is invalid or taken
        """
        session_token = parse_session_token(raw_session_token)

        invalid_params: dict[str, str] = {}
        username = collect(
            invalid_params, USERNAME_KEY, Username.parse_and_validate, raw_username
        )
        email_address = collect(
            invalid_params,
            EMAIL_ADDRESS_KEY,
            EmailAddress.parse_and_validate,
            raw_email_address,
        )
        await self._check_availability(
            invalid_params, username, email_address, session_token
        )
        raise_if_invalid(invalid_params)

        user_profile = ClientModifiableUserProfile(
            username=username, email_address=email_address
        )

        try:
            is_updated = await self.store.update_user_profile(user_profile, session_token)
        except Exception as e:
            if self.store.is_unique_constraint_violated(e):
                await self._raise_conflicts(user_profile, session_token)
            raise

        if not is_updated:
            logger.warning("Profile update failed: invalid session")
            raise InvalidSessionError()

        logger.info(f"Profile updated: {username}")

        return await issue_access_token(self.store, self.settings, session_token)

    async def update_password(
        self,
        raw_session_token: Any,
        raw_password: Any,
        raw_new_password: Any,
    ) -> None:
        """
        Change the caller's password.

        Raises:
            InvalidSessionError: If the session is not live
            IncorrectPasswordError: If the current password is missing or
                does not match
            InvalidParametersError: If the new password breaks the policy
        """
        session_token = parse_session_token(raw_session_token)
        password = self._parse_current_password(raw_password)

        invalid_params: dict[str, str] = {}
        new_password = collect(
            invalid_params,
            NEW_PASSWORD_KEY,
            Password.parse_and_validate,
            raw_new_password,
        )
        raise_if_invalid(invalid_params)

        await self._verify_password(session_token, password)

        new_password_hash = await PasswordHash.create(new_password, self.password_hasher)
        if not await self.store.update_password_hash(new_password_hash, session_token):
            raise InvalidSessionError()

        logger.info("Password updated")

    async def delete_user(self, raw_session_token: Any, raw_password: Any) -> None:
        """
        Delete the caller's account together with all of their sessions.

        Raises:
            IncorrectPasswordError: If the password is missing or does not match
            InvalidSessionError: If the session is not live
        """
        password = self._parse_current_password(raw_password)
        session_token = parse_session_token(raw_session_token)

        await self._verify_password(session_token, password)

        if not await self.store.delete_user_profile(session_token):
            raise InvalidSessionError()

        logger.info("User deleted")

    async def update_user_role(
        self,
        raw_session_token: Any,
        raw_user_id: Any,
        raw_user_role: Any,
    ) -> None:
        """
        Set another user's role. Admin only.

        Raises:
            InvalidSessionError: If the caller's session is not live
            InvalidParametersError: If the user ID or role is invalid
            NotAdminError: If the caller is not an admin
            NotFoundError: If the target user does not exist
        """
        session_token = parse_session_token(raw_session_token)

        invalid_params: dict[str, str] = {}
        user_id = collect(invalid_params, USER_ID_KEY, UserId.parse_string, raw_user_id)
        user_role = collect(invalid_params, USER_ROLE_KEY, UserRole.parse, raw_user_role)
        raise_if_invalid(invalid_params)

        caller = await self.store.fetch_user_identity_from_session_token(session_token)
        if caller is None:
            logger.warning("Role update failed: invalid session")
            raise InvalidSessionError()

        if caller.user_role is not UserRole.ADMIN:
            logger.warning(f"Role update denied: user {caller.user_id} is not an admin")
            raise NotAdminError()

        if not await self.store.update_user_role(user_id, user_role):
            raise NotFoundError()

        logger.info(
            f"User role updated: user {user_id} is now {user_role.value} "
            f"(by {caller.user_id})"
        )

    async def get_usernames(self, raw_user_ids: Any) -> dict[UserId, Username]:
        """
        Look up usernames by user ID.

        Args:
            raw_user_ids: JSON array of positive integers

        Returns:
            Username of each existing user; unknown IDs are left out

        Raises:
            InvalidParametersError: If the IDs are missing, not a JSON array,
                or contain an element that is not a positive integer
        """
        if raw_user_ids is None:
            raise InvalidParametersError({USER_IDS_KEY: "User IDs must be specified."})

        try:
            decoded = json.loads(raw_user_ids)
        except (TypeError, ValueError):
            decoded = None

        if not isinstance(decoded, list):
            raise InvalidParametersError({USER_IDS_KEY: "User IDs must be a JSON array."})

        try:
            user_ids = [UserId.parse_number(raw_user_id) for raw_user_id in decoded]
        except InvalidValueError as e:
            raise InvalidParametersError({USER_IDS_KEY: e.message}) from e

        return await self.store.fetch_usernames_from_user_ids(user_ids)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _parse_current_password(raw_password: Any) -> Password:
        try:
            return Password.parse(raw_password)
        except InvalidValueError as e:
            raise IncorrectPasswordError() from e

    async def _verify_password(self, session_token: SessionToken, password: Password) -> None:
        password_hash = await self.store.fetch_password_hash_from_session_token(session_token)
        if password_hash is None:
            logger.warning("Password check failed: invalid session")
            raise InvalidSessionError()

        if not await password_hash.is_match(password):
            logger.warning("Password check failed: incorrect password")
            raise IncorrectPasswordError()

    async def _check_availability(
        self,
        invalid_params: dict[str, str],
        username: Optional[Username],
        email_address: Optional[EmailAddress],
        excluding_session_token: Optional[SessionToken] = None,
    ) -> None:
        """Record well-formed fields that another user already holds."""
        if username is not None and await self.store.is_username_in_use(
            username, excluding_session_token
        ):
            invalid_params[USERNAME_KEY] = USERNAME_IN_USE

        if email_address is not None and await self.store.is_email_address_in_use(
            email_address, excluding_session_token
        ):
            invalid_params[EMAIL_ADDRESS_KEY] = EMAIL_ADDRESS_IN_USE

    async def _raise_conflicts(
        self,
        user_profile: ClientModifiableUserProfile,
        excluding_session_token: Optional[SessionToken],
    ) -> None:
        """Re-check availability after a duplicate key error and report it as a 400."""
        invalid_params: dict[str, str] = {}
        await self._check_availability(
            invalid_params,
            user_profile.username,
            user_profile.email_address,
            excluding_session_token,
        )
        raise_if_invalid(invalid_params)
