"""Username value object."""

import re
from dataclasses import dataclass
from typing import Any

from user_service.domain.exceptions import InvalidUsernameError
from user_service.domain.value_objects.parsing import parse_raw_string

USERNAME_REGEX = re.compile(r"[A-Za-z0-9_]+")
MIN_LENGTH = 3
MAX_LENGTH = 255


@dataclass(frozen=True)
class Username:
    """
    Username value object.

    Parsing only checks that a single non-empty string was supplied.
    Calling validate() enforces the username policy. Usernames read back
    from the store or from a signed access token are parsed but not
    re-validated.
    """

    value: str

    @classmethod
    def parse(cls, raw: Any) -> "Username":
        """Parse a raw value as a username without enforcing the policy."""
        return cls(parse_raw_string(raw, "Username", InvalidUsernameError))

    @classmethod
    def parse_and_validate(cls, raw: Any) -> "Username":
        """Parse a raw value as a username, then enforce the policy."""
        username = cls.parse(raw)
        username.validate()
        return username

    def validate(self) -> None:
        """
        Enforce the username policy.

        Raises:
            InvalidUsernameError: If the username is too short, too long,
                or contains characters other than letters, digits and
                underscores
        """
        if len(self.value) < MIN_LENGTH:
            raise InvalidUsernameError(
                f"Username must be at least {MIN_LENGTH} characters long."
            )

        if len(self.value) > MAX_LENGTH:
            raise InvalidUsernameError(
                f"Username cannot exceed {MAX_LENGTH} characters."
            )

        if not USERNAME_REGEX.fullmatch(self.value):
            raise InvalidUsernameError(
                "Username can only contain alphanumeric characters and underscores."
            )

    def __str__(self) -> str:
        return self.value
