"""
Exception classes mapped to HTTP responses.

Exception hierarchy:
    AppException (base)
    ├── InvalidParametersError (400)
    ├── AuthenticationError (401)
    │   ├── InvalidCredentialsError
    │   ├── InvalidSessionError
    │   ├── InvalidAccessTokenError
    │   ├── IncorrectPasswordError
    │   └── NotAdminError
    └── NotFoundError (404)

Anything that is not an AppException is rendered as a bare 500.
"""

from typing import Any


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        status_code: HTTP status code for the error
        error_code: Machine-readable error code
        message: Human-readable error message
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Response body for this error."""
        return {"message": self.message}


# =============================================================================
# Validation Errors (400 Bad Request)
# =============================================================================


class InvalidParametersError(AppException):
    """
    Raised when one or more request parameters are invalid.

    details maps each offending parameter name to the reason it was
    rejected. All independent fields are checked before this is raised, so
    the client sees every problem at once.
    """

    def __init__(self, invalid_params: dict[str, str]) -> None:
        super().__init__(
            message="Request parameters are invalid",
            status_code=400,
            error_code="INVALID_PARAMETERS",
            details=dict(invalid_params),
        )

    def to_dict(self) -> dict[str, Any]:
        return dict(self.details)


# =============================================================================
# Authentication Errors (401 Unauthorized)
# =============================================================================


class AuthenticationError(AppException):
    """Base class for authentication and authorization failures."""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: str = "AUTHENTICATION_FAILED",
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
        )


class InvalidCredentialsError(AuthenticationError):
    """
    Raised when login fails.

    The same message is used whether the username does not exist or the
    password is wrong.
    """

    def __init__(self) -> None:
        super().__init__(
            message="Username or password is incorrect.",
            error_code="INVALID_CREDENTIALS",
        )


class InvalidSessionError(AuthenticationError):
    """Raised when a session token is missing, unknown, or expired."""

    def __init__(self) -> None:
        super().__init__(message="Session is invalid.", error_code="INVALID_SESSION")


class InvalidAccessTokenError(AuthenticationError):
    """Raised when an access token is missing or fails verification."""

    def __init__(self) -> None:
        super().__init__(
            message="Access token is invalid.",
            error_code="INVALID_ACCESS_TOKEN",
        )


class IncorrectPasswordError(AuthenticationError):
    """Raised when the current password supplied for a sensitive change is wrong."""

    def __init__(self) -> None:
        super().__init__(
            message="Password is incorrect.",
            error_code="INCORRECT_PASSWORD",
        )


class NotAdminError(AuthenticationError):
    """Raised when a non-admin attempts an admin-only operation."""

    def __init__(self) -> None:
        super().__init__(message="User is not an admin.", error_code="NOT_ADMIN")


# =============================================================================
# Resource Errors (404 Not Found)
# =============================================================================


class NotFoundError(AppException):
    """Raised when the target user of an admin operation does not exist."""

    def __init__(self, message: str = "User does not exist.") -> None:
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
        )
