"""User role enumeration."""

import enum
from typing import Any

from user_service.domain.exceptions import InvalidUserRoleError
from user_service.domain.value_objects.parsing import parse_raw_string


class UserRole(str, enum.Enum):
    """
    Role of a user.

    Attributes:
        user: Regular user (assigned on registration)
        maintainer: Trusted user with elevated rights in downstream services
        admin: May change the role of any user
    """

    USER = "user"
    MAINTAINER = "maintainer"
    ADMIN = "admin"

    @classmethod
    def parse(cls, raw: Any) -> "UserRole":
        """
        Parse a raw value as a user role.

        Matching is exact and case-sensitive. There is no default role:
        a missing value is an error.

        Raises:
            InvalidUserRoleError: If the value is missing or not a known role
        """
        raw = parse_raw_string(raw, "User role", InvalidUserRoleError)

        try:
            return cls(raw)
        except ValueError:
            raise InvalidUserRoleError("User role is invalid.") from None

    def __str__(self) -> str:
        return self.value
