"""Package tracker public API."""

from typing import TYPE_CHECKING

__version__ = "0.1.0"

__all__ = [
    "PackageNotFoundError",
    "RecipientNotFoundError",
    "TrackerConfig",
    "__version__",
    "create_app",
    "create_tracking_router",
    "register_exception_handlers",
]

if TYPE_CHECKING:
    from package_tracker.app import create_app
    from package_tracker.config import TrackerConfig
    from package_tracker.exceptions import (
        PackageNotFoundError,
        RecipientNotFoundError,
        register_exception_handlers,
    )
    from package_tracker.router import create_tracking_router


def __getattr__(name: str):
    # Lazy imports to avoid loading all submodules on package import.
    if name == "TrackerConfig":
        from package_tracker.config import TrackerConfig

        return TrackerConfig
    if name == "create_tracking_router":
        from package_tracker.router import create_tracking_router

        return create_tracking_router
    if name == "create_app":
        from package_tracker.app import create_app

        return create_app
    if name in (
        "PackageNotFoundError",
        "RecipientNotFoundError",
        "register_exception_handlers",
    ):
        from package_tracker import exceptions

        return getattr(exceptions, name)
    raise AttributeError(
        f"module 'package_tracker' has no attribute {name!r}"
    )
