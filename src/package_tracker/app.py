"""Application factory wiring the tracker to a SQLAlchemy database."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from package_tracker.config import TrackerConfig
from package_tracker.contrib.sqlalchemy.models import Base
from package_tracker.contrib.sqlalchemy.repository import (
    SQLAlchemyPackageRepository,
    SQLAlchemyRecipientRepository,
)
from package_tracker.exceptions import register_exception_handlers
from package_tracker.router import create_tracking_router

logger = logging.getLogger(__name__)


def create_app(config: TrackerConfig | None = None) -> FastAPI:
    """Build the tracker app: tables are created on startup."""
    config = config or TrackerConfig()
    logging.basicConfig(level=config.log_level.upper())

    engine = create_async_engine(config.database_url, echo=config.echo_sql)
    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Package tracker started on %s", engine.url)
        yield
        await engine.dispose()

    app = FastAPI(title="Package Tracker", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(
        create_tracking_router(
            package_repository=SQLAlchemyPackageRepository(session_factory),
            recipient_repository=SQLAlchemyRecipientRepository(
                session_factory
            ),
            config=config,
        ),
        prefix="/api",
    )
    return app
