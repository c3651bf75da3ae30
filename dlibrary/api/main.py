"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers, routers, and lifespan events.
"""

import logging
import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from dlibrary.adapters.repository import (
    InMemoryAccountRepository,
    PostgresAccountRepository,
    run_migrations,
    wait_for_database,
)
from dlibrary.api.dependencies import build_registration_service
from dlibrary.api.errors import setup_exception_handlers
from dlibrary.api.v1 import admin_router, auth_router
from dlibrary.config.logging import configure_logging
from dlibrary.config.settings import Settings, get_settings
from dlibrary.domain.ports import AccountRepository

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "auth",
        "description": "Registration, email verification and login",
    },
    {
        "name": "admin",
        "description": "Account moderation - ban, suspend, role changes, soft delete and restore",
    },
]


def seed_admin(repository: AccountRepository, settings: Settings) -> None:
    """Create the development admin account when configured (never in production)."""
    if settings.is_production or not settings.admin_email or not settings.admin_password:
        return
    service = build_registration_service(repository, settings)
    service.ensure_admin(settings.admin_email, settings.admin_password.get_secret_value())


def prepare_database(
    pool: ConnectionPool, repository: AccountRepository, settings: Settings
) -> None:
    """Wait for the database, then run migrations and seed the admin account."""
    try:
        wait_for_database(
            pool,
            max_immediate_retries=settings.db_max_immediate_retries,
            long_backoff=settings.db_long_backoff_seconds,
        )
        run_migrations(pool)
        seed_admin(repository, settings)
        logger.info("Database ready")
    except Exception:
        logger.exception("Database preparation failed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the account store (Postgres pool or in-memory)
    - Connects, migrates and seeds in the background so the server starts
      even while the database is unreachable
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Starting application...")
    pool: ConnectionPool | None = None

    if settings.storage_backend == "memory":
        logger.info("Using in-memory account store")
        repository: AccountRepository = InMemoryAccountRepository()
        seed_admin(repository, settings)
    else:
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=False,
        )
        pool.open(wait=False)
        repository = PostgresAccountRepository(pool)
        threading.Thread(
            target=prepare_database,
            args=(pool, repository, settings),
            name="database-prepare",
            daemon=True,
        ).start()

    # Store pool and repository in app state for dependency injection
    app.state.pool = pool
    app.state.repository = repository

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="dlibrary",
    description="Digital Library account API - email verification and account moderation",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

setup_exception_handlers(app)
app.include_router(auth_router, prefix="/api/auth")
app.include_router(admin_router, prefix="/api/admin")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = getattr(request.app.state, "pool", None)
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")

    return {"status": "healthy"}
