"""User profile and identity records."""

from dataclasses import dataclass
from typing import Any

from user_service.domain.parameter_keys import (
    EMAIL_ADDRESS_KEY,
    USER_ID_KEY,
    USER_ROLE_KEY,
    USERNAME_KEY,
)
from user_service.domain.value_objects.email_address import EmailAddress
from user_service.domain.value_objects.user_id import UserId
from user_service.domain.value_objects.user_role import UserRole
from user_service.domain.value_objects.username import Username


@dataclass(frozen=True)
class ClientModifiableUserProfile:
    """Profile fields a client may set on registration or profile update."""

    username: Username
    email_address: EmailAddress


@dataclass(frozen=True)
class UserIdentity:
    """User ID and role; enough for authorization checks."""

    user_id: UserId
    user_role: UserRole

    def to_json(self) -> dict[str, Any]:
        return {
            USER_ID_KEY: self.user_id.value,
            USER_ROLE_KEY: self.user_role.value,
        }


@dataclass(frozen=True)
class UserProfile:
    """Full identity record of a user."""

    user_id: UserId
    username: Username
    email_address: EmailAddress
    user_role: UserRole

    @property
    def identity(self) -> UserIdentity:
        return UserIdentity(user_id=self.user_id, user_role=self.user_role)

    def to_json(self) -> dict[str, Any]:
        """Return the profile as a JSON-compatible dict keyed by parameter names."""
        return {
            USER_ID_KEY: self.user_id.value,
            USERNAME_KEY: self.username.value,
            EMAIL_ADDRESS_KEY: self.email_address.value,
            USER_ROLE_KEY: self.user_role.value,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "UserProfile":
        """
        Rebuild a profile from its JSON form.

        Every field goes back through its parser, so a malformed claim
        raises InvalidValueError.
        """
        return cls(
            user_id=UserId.parse_number(data.get(USER_ID_KEY)),
            username=Username.parse(data.get(USERNAME_KEY)),
            email_address=EmailAddress.parse(data.get(EMAIL_ADDRESS_KEY)),
            user_role=UserRole.parse(data.get(USER_ROLE_KEY)),
        )
