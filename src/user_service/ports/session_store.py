"""Session store port interface."""

from datetime import datetime
from typing import Optional, Protocol

from user_service.domain.value_objects import (
    ClientModifiableUserProfile,
    EmailAddress,
    PasswordHash,
    SessionToken,
    UserId,
    UserIdentity,
    UserProfile,
    UserRole,
    Username,
)


class SessionStore(Protocol):
    """
    Persistence operations for user profiles, credentials and sessions.

    A session is only visible to read and update operations while its
    expiry is strictly in the future. Expired sessions may still be stored;
    implementations filter them out rather than rely on purging.

    Every method may raise a store level error (connectivity, constraint
    violation) which is distinct from the "absent" results documented below.
    """

    async def initialise(self) -> None:
        """Prepare the store for use (e.g. verify connectivity)."""
        ...

    async def dispose(self) -> None:
        """Release pooled connections."""
        ...

    async def check_connection(self) -> bool:
        """Return True if the store is reachable."""
        ...

    # ---- Sessions ----

    async def create_user_session(
        self,
        session_token: SessionToken,
        username: Username,
        expiry: datetime,
    ) -> None:
        """
        Create a session for the user with the given username.

        Args:
            session_token: Freshly minted session token
            username: Owner of the session
            expiry: When the session stops being valid

        Raises:
            Exception: A uniqueness violation (see
                is_unique_constraint_violated) if the token already exists,
                or a store error if no user has the username
        """
        ...

    async def update_user_session_expiry(
        self, session_token: SessionToken, expiry: datetime
    ) -> bool:
        """
        Move the expiry of a live session.

        Returns:
            True if a live session matched the token, False otherwise
        """
        ...

    async def delete_user_session(self, session_token: SessionToken) -> bool:
        """
        Delete a live session.

        Returns:
            True if a live session was deleted, False otherwise
        """
        ...

    # ---- Credentials ----

    async def fetch_password_hash_from_username(
        self, username: Username
    ) -> Optional[PasswordHash]:
        """Return the password hash of a user, or None if no user has the username."""
        ...

    async def fetch_password_hash_from_session_token(
        self, session_token: SessionToken
    ) -> Optional[PasswordHash]:
        """Return the password hash of a live session's owner, or None."""
        ...

    async def update_password_hash(
        self, password_hash: PasswordHash, session_token: SessionToken
    ) -> bool:
        """Replace the password hash of a live session's owner."""
        ...

    # ---- Profiles ----

    async def create_user_profile_and_credential(
        self,
        user_profile: ClientModifiableUserProfile,
        password_hash: PasswordHash,
    ) -> UserId:
        """
        Create a user profile with the user role and its credential.

        Both rows are created or neither is.

        Returns:
            ID of the new user
        """
        ...

    async def fetch_user_profile_from_session_token(
        self, session_token: SessionToken
    ) -> Optional[UserProfile]:
        """Return the profile of a live session's owner, or None."""
        ...

    async def fetch_user_identity_from_session_token(
        self, session_token: SessionToken
    ) -> Optional[UserIdentity]:
        """Return the identity of a live session's owner, or None."""
        ...

    async def fetch_usernames_from_user_ids(
        self, user_ids: list[UserId]
    ) -> dict[UserId, Username]:
        """Map each existing user ID to its username. Unknown IDs are omitted."""
        ...

    async def update_user_profile(
        self,
        user_profile: ClientModifiableUserProfile,
        session_token: SessionToken,
    ) -> bool:
        """Update username and email address of a live session's owner."""
        ...

    async def update_user_role(self, user_id: UserId, user_role: UserRole) -> bool:
        """
        Set the role of a user.

        Returns:
            True if the user exists, False otherwise
        """
        ...

    async def delete_user_profile(self, session_token: SessionToken) -> bool:
        """
        Delete the profile of a live session's owner.

        The owner's credential and all of their sessions are deleted with it.
        """
        ...

    async def is_username_in_use(
        self,
        username: Username,
        excluding_session_token: Optional[SessionToken] = None,
    ) -> bool:
        """
        Check whether a username is taken.

        Args:
            username: Username to look up
            excluding_session_token: If given, the owner of this session is
                not counted, so a user keeping their own username does not
                conflict with themselves
        """
        ...

    async def is_email_address_in_use(
        self,
        email_address: EmailAddress,
        excluding_session_token: Optional[SessionToken] = None,
    ) -> bool:
        """Check whether an email address is taken. See is_username_in_use."""
        ...

    def is_unique_constraint_violated(self, error: BaseException) -> bool:
        """Return True if the error is a duplicate key violation raised by this store."""
        ...

    # ---- Schema management ----

    async def do_entities_exist(self) -> bool:
        """Return True if any of the store's tables exist."""
        ...

    async def delete_entities(self) -> None:
        """Drop the store's tables."""
        ...

    async def synchronise(self) -> None:
        """Create any of the store's tables that do not exist."""
        ...
