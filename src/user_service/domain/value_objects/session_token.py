"""Session token value object."""

import uuid
from dataclasses import dataclass
from typing import Any

from user_service.domain.exceptions import InvalidSessionTokenError
from user_service.domain.value_objects.parsing import parse_raw_string


@dataclass(frozen=True)
class SessionToken:
    """
    Opaque identifier of a login session.

    Tokens are random UUIDs. create() never checks for collisions; the store
    rejects duplicates and the caller retries with a fresh token.
    """

    value: str

    @classmethod
    def parse(cls, raw: Any) -> "SessionToken":
        """Parse a session token supplied by a client."""
        return cls(parse_raw_string(raw, "Session token", InvalidSessionTokenError))

    @classmethod
    def create(cls) -> "SessionToken":
        """Mint a fresh random session token."""
        return cls(str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return "SessionToken(***REDACTED***)"
