"""
FastAPI application entry point.

This module sets up:
- FastAPI application with middleware
- Exception handlers
- API routes under /user-service
- CORS configuration for local development
"""

import logging

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from user_service.api.routes import health, keys, sessions, users
from user_service.core.config import Settings, get_settings
from user_service.core.handlers import (
    app_exception_handler,
    general_exception_handler,
    validation_exception_handler,
)
from user_service.core.lifespan import lifespan
from user_service.core.logging import setup_logging
from user_service.exceptions import AppException
from user_service.middleware import RequestIDMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)

API_PREFIX = "/user-service"


def create_app(settings: Settings) -> FastAPI:
    """
    Build the application for the given settings.

    The settings are attached to app.state and handed to every component
    from there. The session store is opened by the lifespan handler.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ========================================================================
    # Exception Handlers
    # ========================================================================
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # ========================================================================
    # Middleware Setup (Order matters!)
    # ========================================================================
    # Added last runs first: request ID is set before the request is logged
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=r"http://localhost(:\d+)?",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # ========================================================================
    # API Routes
    # ========================================================================
    api_router = APIRouter(prefix=API_PREFIX)
    api_router.include_router(health.router)
    api_router.include_router(keys.router)
    api_router.include_router(sessions.router)
    api_router.include_router(users.router)

    app.include_router(api_router)

    return app


def run() -> None:
    """Console script entry point: serve the application with uvicorn."""
    settings = get_settings()
    setup_logging(settings)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
