"""Helpers for turning raw request values into value objects."""

from typing import Any, Callable, Optional, TypeVar

from user_service.domain.exceptions import InvalidValueError
from user_service.domain.value_objects import SessionToken
from user_service.exceptions import InvalidParametersError, InvalidSessionError

T = TypeVar("T")


def collect(
    invalid_params: dict[str, str],
    key: str,
    parser: Callable[[Any], T],
    raw: Any,
) -> Optional[T]:
    """
    Parse a raw value, recording the failure reason instead of raising.

    Lets a flow check every independent field before reporting, so the
    client sees all problems in one response.

    Returns:
        The parsed value, or None if it was rejected
    """
    try:
        return parser(raw)
    except InvalidValueError as e:
        invalid_params[key] = e.message
        return None


def raise_if_invalid(invalid_params: dict[str, str]) -> None:
    """Raise InvalidParametersError if any field was rejected."""
    if invalid_params:
        raise InvalidParametersError(invalid_params)


def parse_session_token(raw: Any) -> SessionToken:
    """
    Parse a session token supplied by the client.

    A missing or malformed token is reported exactly like an unknown one.
    """
    try:
        return SessionToken.parse(raw)
    except InvalidValueError as e:
        raise InvalidSessionError() from e
