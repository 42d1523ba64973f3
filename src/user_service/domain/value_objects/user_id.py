"""User ID value object."""

import re
from dataclasses import dataclass
from typing import Any

from user_service.domain.exceptions import InvalidUserIdError
from user_service.domain.value_objects.parsing import parse_raw_string

POSITIVE_INTEGER_REGEX = re.compile(r"[1-9][0-9]*")

# user_id is a PostgreSQL integer column
MAX_USER_ID = 2**31 - 1


@dataclass(frozen=True)
class UserId:
    """Positive integer identifier of a user. IDs start at 1."""

    value: int

    @classmethod
    def parse_string(cls, raw: Any) -> "UserId":
        """
        Parse a path or query parameter as a user ID.

        Raises:
            InvalidUserIdError: If the value is missing or not a positive
                integer written in canonical decimal form, or exceeds
                the largest storable ID
        """
        raw = parse_raw_string(raw, "User ID", InvalidUserIdError)

        # Length check first; int() refuses very long digit strings
        if (
            not POSITIVE_INTEGER_REGEX.fullmatch(raw)
            or len(raw) > len(str(MAX_USER_ID))
            or int(raw) > MAX_USER_ID
        ):
            raise InvalidUserIdError("User ID must be a positive integer.")

        return cls(int(raw))

    @classmethod
    def parse_number(cls, raw: Any) -> "UserId":
        """
        Parse a numeric value (JSON claim, database column) as a user ID.

        Raises:
            InvalidUserIdError: If the value is missing, not an integer, or
                not positive or too large
        """
        if raw is None:
            raise InvalidUserIdError("User ID cannot be empty.")

        # bool is an int subclass; JSON true/false is not a user ID
        if isinstance(raw, bool) or not isinstance(raw, int) or not 0 < raw <= MAX_USER_ID:
            raise InvalidUserIdError("User ID must be a positive integer.")

        return cls(raw)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)
