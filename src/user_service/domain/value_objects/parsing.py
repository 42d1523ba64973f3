"""Shared parsing for raw transport values."""

from typing import Any


def parse_raw_string(
    raw: Any,
    label: str,
    error_cls: type[Exception],
) -> str:
    """
    Accept a raw value only if it is a single non-empty string.

    Raw values may come from query strings, cookies, JSON token claims, or
    environment variables. Query strings can carry repeated keys, which
    arrive as a list; those are rejected as "not a string" rather than
    silently picking one of them.

    Args:
        raw: Value to parse (None when absent)
        label: Human readable name used in the error message, e.g. "Username"
        error_cls: Exception raised with the reason

    Returns:
        The raw string, unchanged

    Raises:
        error_cls: "<label> must be a string." or "<label> cannot be empty."
    """
    if raw is not None and not isinstance(raw, str):
        raise error_cls(f"{label} must be a string.")

    if not raw:
        raise error_cls(f"{label} cannot be empty.")

    return raw
