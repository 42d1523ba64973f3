"""
Access token codec.

An access token is a JWT signed with RS256 whose payload is the user's
profile. It is verified with the public key alone, so serving a profile
read needs no store lookup. Tokens cannot be revoked; they simply expire.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from user_service.domain.exceptions import InvalidAccessTokenError, InvalidValueError
from user_service.domain.value_objects.user_profile import UserProfile

ALGORITHM = "RS256"


@dataclass(frozen=True)
class AccessToken:
    """
    Signed access token together with its decoded profile and expiry.

    Attributes:
        token: Encoded JWT string
        user_profile: Profile carried in the token payload
        expiry: When the token stops being accepted (UTC)
    """

    token: str
    user_profile: UserProfile
    expiry: datetime

    @classmethod
    def create(
        cls,
        user_profile: UserProfile,
        private_key: str,
        expire_millis: int,
    ) -> "AccessToken":
        """
        Sign a new access token for a profile.

        Args:
            user_profile: Profile to embed as claims
            private_key: PEM encoded RSA private key
            expire_millis: Milliseconds until the token expires

        Returns:
            The signed AccessToken
        """
        issued_at = datetime.now(UTC)
        expiry = issued_at + timedelta(milliseconds=expire_millis)

        claims: dict[str, Any] = user_profile.to_json()
        claims.update({"iat": issued_at, "exp": expiry})

        token = jwt.encode(claims, private_key, algorithm=ALGORITHM)

        # JWT expiry has one second resolution
        return cls(token=token, user_profile=user_profile, expiry=expiry.replace(microsecond=0))

    @classmethod
    def verify(cls, raw_token: Any, public_key: str) -> "AccessToken":
        """
        Verify and decode an access token.

        Checks the signature and expiry, requires the expiry claim, then
        re-parses every profile claim through its value object.

        Args:
            raw_token: Encoded token as supplied by the client
            public_key: PEM encoded RSA public key

        Returns:
            The decoded AccessToken

        Raises:
            InvalidAccessTokenError: If the token is missing, malformed,
                signed with another key, expired, lacks an expiry, or carries
                a claim that does not parse
        """
        if not isinstance(raw_token, str) or not raw_token:
            raise InvalidAccessTokenError("Access token cannot be empty.")

        try:
            payload = jwt.decode(raw_token, public_key, algorithms=[ALGORITHM])
        except JWTError as e:
            raise InvalidAccessTokenError(f"Access token could not be verified: {e}") from e

        exp = payload.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise InvalidAccessTokenError("Access token expiry date and time is missing.")

        try:
            user_profile = UserProfile.from_json(payload)
        except InvalidValueError as e:
            raise InvalidAccessTokenError(e.message) from e

        return cls(
            token=raw_token,
            user_profile=user_profile,
            expiry=datetime.fromtimestamp(exp, UTC),
        )

    def __str__(self) -> str:
        return self.token
