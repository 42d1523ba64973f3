"""Password hash value object."""

from dataclasses import dataclass

from argon2 import PasswordHasher

from user_service.core import security
from user_service.domain.value_objects.password import Password


@dataclass(frozen=True)
class PasswordHash:
    """
    Salted Argon2id hash of a password.

    The hash is opaque: it can only be produced from a Password and compared
    against a Password, never reversed.
    """

    value: str

    @classmethod
    async def create(cls, password: Password, hasher: PasswordHasher) -> "PasswordHash":
        """
        Hash a password.

        Args:
            password: Plain text password
            hasher: Argon2 hasher configured with the service's hash cost

        Returns:
            Hash of the password (includes algorithm, parameters and salt)
        """
        return cls(await security.hash_password(hasher, str(password)))

    async def is_match(self, password: Password) -> bool:
        """Return True if the password matches this hash."""
        return await security.verify_password(str(password), self.value)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return "PasswordHash(***REDACTED***)"
