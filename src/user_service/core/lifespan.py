import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from user_service.core.config import Settings
from user_service.core.database import create_database_engine
from user_service.core.security import create_password_hasher
from user_service.repositories import SqlAlchemySessionStore

logger = logging.getLogger(__name__)


# ============================================================================
# Lifespan Context Manager
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore
    """
    Lifespan context manager for startup and shutdown events.

    Handles:
    - Database engine and session store creation, stored in app.state
    - Password hasher creation from the configured cost
    - Resource cleanup on shutdown
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} v{settings.version}")
    logger.info(f"Environment: {settings.environment}")

    store = SqlAlchemySessionStore(create_database_engine(settings))
    await store.initialise()

    app.state.session_store = store
    app.state.password_hasher = create_password_hasher(settings)

    logger.info("Session store ready")

    yield

    # Cleanup on shutdown
    logger.info("Shutting down application")
    await store.dispose()
    app.state.session_store = None
