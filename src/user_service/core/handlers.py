"""
Exception handlers for FastAPI application.

This module provides:
- Custom application exception handler (AppException)
- Request validation error handler (RequestValidationError)
- General unhandled exception handler (Exception)
"""

import logging

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from user_service.exceptions import AppException

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle classified application exceptions.

    400 responses carry the {parameter: reason} map, other errors carry a
    fixed message.
    """
    logger.warning(
        f"Application exception: {exc.error_code} - {exc.message} "
        f"({request.method} {request.url.path})"
    )

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI's own parameter validation failures as a 400 field map."""
    logger.warning(f"Validation error: {exc.errors()}")

    invalid_params: dict[str, str] = {}
    for error in exc.errors():
        field = str(error["loc"][-1]) if error["loc"] else "request"
        invalid_params.setdefault(field, error["msg"])

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=invalid_params,
    )


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """
    Handle unexpected exceptions.

    Logs the full error and returns an empty 500; no internal details are
    exposed to the client.
    """
    logger.error(
        f"Unexpected error: {exc!r} ({request.method} {request.url.path})",
        exc_info=exc,
    )

    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
