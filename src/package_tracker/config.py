"""Package tracker configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackerConfig(BaseSettings):
    """Runtime config for the package tracker."""

    model_config = SettingsConfigDict(env_prefix="TRACKER_")

    database_url: str = "sqlite+aiosqlite:///./package_tracker.db"
    echo_sql: bool = False
    log_level: str = "INFO"
    allocation_attempts: int = Field(default=3, ge=1)
    max_import_size: int = Field(default=10 * 1024 * 1024, gt=0)
