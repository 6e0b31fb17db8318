"""Entity services."""

from package_tracker.services.packages import PackageService
from package_tracker.services.recipients import RecipientService

__all__ = ["PackageService", "RecipientService"]
