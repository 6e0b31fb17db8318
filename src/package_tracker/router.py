"""Router factory for the package tracker."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from package_tracker.config import TrackerConfig
from package_tracker.protocols import PackageRepository, RecipientRepository
from package_tracker.routes.packages import router as packages_router
from package_tracker.routes.recipients import router as recipients_router


def create_tracking_router(
    *,
    package_repository: PackageRepository,
    recipient_repository: RecipientRepository,
    config: TrackerConfig | None = None,
) -> APIRouter:
    """Create a configured API router.

    The router lifespan publishes the repositories and config on
    ``app.state``. Exception handlers must be registered on the app itself
    with :func:`package_tracker.exceptions.register_exception_handlers`.
    """
    actual_config = config or TrackerConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        app.state.tracker_config = actual_config
        app.state.tracker_package_repository = package_repository
        app.state.tracker_recipient_repository = recipient_repository
        yield

    router = APIRouter(lifespan=lifespan)
    router.include_router(packages_router)
    router.include_router(recipients_router)
    return router
