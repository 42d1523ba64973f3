"""Domain exception classes."""


class DomainException(Exception):
    """Base exception for all domain-related errors."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, code={self.code!r})"


class InvalidValueError(DomainException):
    """
    Raised when a raw value cannot be parsed or validated as a credential
    primitive.

    The message is a field-level reason suitable for returning to the client.
    """


class InvalidUsernameError(InvalidValueError):
    """Raised when a username is invalid."""

    def __init__(self, reason: str):
        super().__init__(message=reason, code="INVALID_USERNAME")


class InvalidEmailAddressError(InvalidValueError):
    """Raised when an email address is invalid."""

    def __init__(self, reason: str):
        super().__init__(message=reason, code="INVALID_EMAIL_ADDRESS")


class InvalidPasswordError(InvalidValueError):
    """Raised when a password is missing or does not meet the password policy."""

    def __init__(self, reason: str):
        super().__init__(message=reason, code="INVALID_PASSWORD")


class InvalidUserIdError(InvalidValueError):
    """Raised when a user ID is not a positive integer."""

    def __init__(self, reason: str):
        super().__init__(message=reason, code="INVALID_USER_ID")


class InvalidUserRoleError(InvalidValueError):
    """Raised when a user role is not one of the known roles."""

    def __init__(self, reason: str):
        super().__init__(message=reason, code="INVALID_USER_ROLE")


class InvalidSessionTokenError(InvalidValueError):
    """Raised when a session token is missing or malformed."""

    def __init__(self, reason: str):
        super().__init__(message=reason, code="INVALID_SESSION_TOKEN")


class InvalidAccessTokenError(DomainException):
    """Raised when an access token fails signature, expiry, or claim checks."""

    def __init__(self, reason: str):
        super().__init__(message=reason, code="INVALID_ACCESS_TOKEN")
