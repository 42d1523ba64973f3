"""
Database engine management.

Async SQLAlchemy 2.0 engine for PostgreSQL over asyncpg, with connection
pooling sized from settings.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from user_service.core.config import Settings

logger = logging.getLogger(__name__)


def create_database_engine(settings: Settings) -> AsyncEngine:
    """
    Create async database engine with connection pooling.

    Connection Pool Configuration:
        - pool_size: settings.database_max_client_count
        - pool_timeout: settings.database_connection_timeout_millis
          (0 means wait indefinitely for a connection)
        - pool_pre_ping: test connection before use
    """
    logger.info("Initializing database engine...")

    timeout_millis = settings.database_connection_timeout_millis
    connect_args: dict = {
        "server_settings": {"application_name": settings.app_name},
    }
    if settings.database_should_use_tls:
        connect_args["ssl"] = True

    engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.database_max_client_count,
        max_overflow=0,
        pool_pre_ping=True,
        pool_timeout=timeout_millis / 1000 if timeout_millis else None,
        connect_args=connect_args,
    )

    logger.info(
        f"Database engine created: host={settings.database_host} "
        f"database={settings.database_name} pool_size={settings.database_max_client_count}"
    )

    return engine


async def close_database_connection(engine: AsyncEngine) -> None:
    """
    Dispose of the engine's connection pool.

    Errors are logged and not raised, since this only runs on shutdown.
    """
    try:
        await engine.dispose()
        logger.info("Database engine disposed successfully")
    except Exception as e:
        logger.error(f"Error disposing database engine: {e}")
