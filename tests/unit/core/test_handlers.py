"""
Unit tests for exception handlers.

Tests cover:
- AppException handler response format per error class
- Validation error handler formatting
- General exception handler hiding internals
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError

from user_service.core.handlers import (
    app_exception_handler,
    general_exception_handler,
    validation_exception_handler,
)
from user_service.exceptions import (
    IncorrectPasswordError,
    InvalidCredentialsError,
    InvalidParametersError,
    InvalidSessionError,
    NotAdminError,
    NotFoundError,
)


@pytest.fixture
def mock_request() -> MagicMock:
    """Create a mock request."""
    request = MagicMock(spec=Request)
    request.method = "GET"
    request.client.host = "127.0.0.1"
    return request


class TestAppExceptionHandler:
    """Tests for app_exception_handler."""

    async def test_invalid_parameters_body_is_field_map(self, mock_request) -> None:
        """400 responses carry exactly the {field: reason} map."""
        exc = InvalidParametersError(
            {"username": "Username cannot be empty.", "password": "Password cannot be empty."}
        )

        response = await app_exception_handler(mock_request, exc)

        assert response.status_code == 400
        assert json.loads(response.body) == {
            "username": "Username cannot be empty.",
            "password": "Password cannot be empty.",
        }

    @pytest.mark.parametrize(
        "exc, status_code, message",
        [
            (InvalidSessionError(), 401, "Session is invalid."),
            (IncorrectPasswordError(), 401, "Password is incorrect."),
            (NotAdminError(), 401, "User is not an admin."),
            (InvalidCredentialsError(), 401, "Username or password is incorrect."),
            (NotFoundError(), 404, "User does not exist."),
        ],
    )
    async def test_fixed_messages(self, mock_request, exc, status_code, message) -> None:
        response = await app_exception_handler(mock_request, exc)

        assert response.status_code == status_code
        assert json.loads(response.body) == {"message": message}


class TestValidationExceptionHandler:
    """Tests for validation_exception_handler."""

    async def test_returns_400_with_field_map(self, mock_request) -> None:
        exc = RequestValidationError(
            [{"loc": ("query", "user-id"), "msg": "Input should be a valid integer", "type": "int_parsing"}]
        )

        response = await validation_exception_handler(mock_request, exc)

        assert response.status_code == 400
        assert json.loads(response.body) == {"user-id": "Input should be a valid integer"}


class TestGeneralExceptionHandler:
    """Tests for general_exception_handler."""

    async def test_returns_empty_500(self, mock_request) -> None:
        """Unexpected errors never leak details."""
        response = await general_exception_handler(
            mock_request, RuntimeError("connection refused at 10.0.0.5")
        )

        assert response.status_code == 500
        assert response.body == b""
