"""Dependency providers for request handlers."""

from __future__ import annotations

from fastapi import Request

from package_tracker.bulk import BulkCoordinator
from package_tracker.config import TrackerConfig
from package_tracker.protocols import PackageRepository, RecipientRepository
from package_tracker.services import PackageService, RecipientService


def get_config(request: Request) -> TrackerConfig:
    """Read config from FastAPI app state."""
    return request.app.state.tracker_config


def get_package_repository(request: Request) -> PackageRepository:
    """Read the package repository from FastAPI app state."""
    return request.app.state.tracker_package_repository


def get_recipient_repository(request: Request) -> RecipientRepository:
    """Read the recipient repository from FastAPI app state."""
    return request.app.state.tracker_recipient_repository


def get_package_service(request: Request) -> PackageService:
    """Create a PackageService for the current request."""
    return PackageService(
        repository=get_package_repository(request),
        recipient_repository=get_recipient_repository(request),
        config=get_config(request),
    )


def get_recipient_service(request: Request) -> RecipientService:
    """Create a RecipientService for the current request."""
    return RecipientService(
        repository=get_recipient_repository(request),
        config=get_config(request),
    )


def get_bulk_coordinator(request: Request) -> BulkCoordinator:
    """Create a BulkCoordinator for the current request."""
    return BulkCoordinator(
        packages=get_package_service(request),
        recipients=get_recipient_service(request),
    )
