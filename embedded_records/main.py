"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from embedded_records.config import get_settings
from embedded_records.infrastructure.database import Base, engine
from embedded_records.infrastructure.dependencies import get_sse_manager
from embedded_records.infrastructure.logging.log_config import setup_logging
from embedded_records.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def _ensure_database_exists(database_url: str) -> None:
    """Create the PostgreSQL database if it does not yet exist.

    Connects to the default ``postgres`` maintenance database, checks for the
    target database name, and issues ``CREATE DATABASE`` when missing.
    """
    import asyncpg

    db_name = urlparse(database_url).path.lstrip("/")
    if not db_name:
        return

    maintenance_url = database_url.rsplit("/", 1)[0] + "/postgres"

    try:
        conn = await asyncpg.connect(maintenance_url)
        try:
            exists = await conn.fetchval(
                "SELECT 1 FROM pg_database WHERE datname = $1", db_name
            )
            if not exists:
                # CREATE DATABASE cannot run inside a transaction block
                await conn.execute(f'CREATE DATABASE "{db_name}"')
                logger.info("Created database '%s'", db_name)
            else:
                logger.debug("Database '%s' already exists", db_name)
        finally:
            await conn.close()
    except Exception as exc:
        logger.warning("Could not auto-create database '%s': %s", db_name, exc)


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    path = database_url.split(":///", 1)[-1]
    if path and path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging, create tables, stop SSE clients."""
    settings = get_settings()
    setup_logging()

    # 1. Make sure the database can be reached
    if settings.database_url.startswith("postgresql://"):
        await _ensure_database_exists(settings.database_url)
    elif settings.database_url.startswith("sqlite:///"):
        _ensure_sqlite_directory(settings.database_url)

    # 2. Create all database tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(
        "Embedded records API ready (serialized writes: %s)",
        settings.serialize_container_writes,
    )

    yield

    # Shutdown
    sse = get_sse_manager()
    await sse.shutdown()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "embedded_records.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
