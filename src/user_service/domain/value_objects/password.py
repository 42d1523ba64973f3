"""Password value object."""

import re
import string
from dataclasses import dataclass
from typing import Any

from user_service.domain.exceptions import InvalidPasswordError
from user_service.domain.value_objects.parsing import parse_raw_string

MIN_LENGTH = 8
MAX_LENGTH = 255
SPECIAL_CHARACTERS = "!@#$%^&*"

VALID_CHARACTERS_REGEX = re.compile(
    rf"[{string.ascii_letters}{string.digits}{re.escape(SPECIAL_CHARACTERS)}]*"
)


@dataclass(frozen=True)
class Password:
    """
    Plain text password.

    Use parse() when checking a password against an existing hash, and
    parse_and_validate() when a new password is being set.
    """

    value: str

    @classmethod
    def parse(cls, raw: Any) -> "Password":
        """Parse a raw value as a password without enforcing the policy."""
        return cls(parse_raw_string(raw, "Password", InvalidPasswordError))

    @classmethod
    def parse_and_validate(cls, raw: Any) -> "Password":
        """Parse a raw value as a password, then enforce the policy."""
        password = cls.parse(raw)
        password.validate()
        return password

    def validate(self) -> None:
        """
        Enforce the password policy.

        Requirements:
        - 8 to 255 characters
        - Only letters, digits and !@#$%^&*
        - At least one uppercase letter, one lowercase letter, one digit
          and one special character

        Raises:
            InvalidPasswordError: Naming the first rule that is violated
        """
        if len(self.value) < MIN_LENGTH:
            raise InvalidPasswordError(
                f"Password must be at least {MIN_LENGTH} characters long."
            )

        if len(self.value) > MAX_LENGTH:
            raise InvalidPasswordError(
                f"Password cannot exceed {MAX_LENGTH} characters."
            )

        if not VALID_CHARACTERS_REGEX.fullmatch(self.value):
            raise InvalidPasswordError(
                f"Password can only contain {SPECIAL_CHARACTERS} or alphanumeric characters."
            )

        if not self._has_required_characters():
            raise InvalidPasswordError(
                "Password must contain at least one uppercase alphabet, one lowercase "
                "alphabet, one numeric character, and one of the following: "
                f"{SPECIAL_CHARACTERS}"
            )

    def _has_required_characters(self) -> bool:
        return (
            any(c in string.ascii_uppercase for c in self.value)
            and any(c in string.ascii_lowercase for c in self.value)
            and any(c in string.digits for c in self.value)
            and any(c in SPECIAL_CHARACTERS for c in self.value)
        )

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return "Password(***REDACTED***)"
