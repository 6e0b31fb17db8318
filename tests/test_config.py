"""Configuration tests."""

import pytest
from pydantic import ValidationError

from package_tracker.config import TrackerConfig


def test_defaults() -> None:
    config = TrackerConfig()
    assert config.database_url.startswith("sqlite+aiosqlite://")
    assert config.echo_sql is False
    assert config.log_level == "INFO"
    assert config.allocation_attempts == 3
    assert config.max_import_size == 10 * 1024 * 1024


def test_env_prefix(monkeypatch) -> None:
    monkeypatch.setenv("TRACKER_DATABASE_URL", "sqlite+aiosqlite:///x.db")
    monkeypatch.setenv("TRACKER_ALLOCATION_ATTEMPTS", "5")
    monkeypatch.setenv("TRACKER_ECHO_SQL", "true")

    config = TrackerConfig()
    assert config.database_url == "sqlite+aiosqlite:///x.db"
    assert config.allocation_attempts == 5
    assert config.echo_sql is True


def test_allocation_attempts_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        TrackerConfig(allocation_attempts=0)
