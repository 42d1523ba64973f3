"""Email address value object."""

import re
from dataclasses import dataclass
from typing import Any

from user_service.domain.exceptions import InvalidEmailAddressError
from user_service.domain.value_objects.parsing import parse_raw_string

MAX_LENGTH = 255

_DOMAIN_LABEL = r"[a-z0-9](?:[a-z0-9\-]*[a-z0-9])?"
_LOCAL_CHARS = r"[a-z0-9!#$%&'*+\-/=?^_`{|}~]"

EMAIL_ADDRESS_REGEX = re.compile(
    rf"{_LOCAL_CHARS}+(?:\.{_LOCAL_CHARS}+)*"
    rf"@{_DOMAIN_LABEL}(?:\.{_DOMAIN_LABEL})+"
)


@dataclass(frozen=True)
class EmailAddress:
    """
    Email address value object.

    The address is lower-cased on construction, so two addresses that
    differ only in case are equal.
    """

    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", self.value.lower())

    @classmethod
    def parse(cls, raw: Any) -> "EmailAddress":
        """Parse a raw value as an email address without checking its format."""
        return cls(parse_raw_string(raw, "Email address", InvalidEmailAddressError))

    @classmethod
    def parse_and_validate(cls, raw: Any) -> "EmailAddress":
        """Parse a raw value as an email address, then check its format."""
        email_address = cls.parse(raw)
        email_address.validate()
        return email_address

    def validate(self) -> None:
        """
        Check length and structure of the address.

        Raises:
            InvalidEmailAddressError: If the address is too long or malformed
        """
        if len(self.value) > MAX_LENGTH:
            raise InvalidEmailAddressError(
                f"Email address cannot exceed {MAX_LENGTH} characters."
            )

        if not EMAIL_ADDRESS_REGEX.fullmatch(self.value):
            raise InvalidEmailAddressError("Email address is invalid.")

    def __str__(self) -> str:
        return self.value
