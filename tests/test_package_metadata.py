"""Package metadata and public API tests."""

import re
from pathlib import Path

import pytest

import package_tracker


def test_version_is_semver() -> None:
    assert package_tracker.__version__ == "0.1.0"
    assert re.match(r"^\d+\.\d+\.\d+", package_tracker.__version__)


def test_py_typed_marker_exists() -> None:
    marker = (
        Path(__file__).resolve().parents[1]
        / "src"
        / "package_tracker"
        / "py.typed"
    )
    assert marker.exists(), "py.typed marker file must exist"


def test_all_exports_importable() -> None:
    expected = {
        "PackageNotFoundError",
        "RecipientNotFoundError",
        "TrackerConfig",
        "__version__",
        "create_app",
        "create_tracking_router",
        "register_exception_handlers",
    }
    assert set(package_tracker.__all__) == expected

    for name in expected:
        obj = getattr(package_tracker, name)
        assert obj is not None, f"{name} resolved to None"


def test_getattr_raises_for_unknown_attribute() -> None:
    with pytest.raises(AttributeError, match="no_such_thing"):
        package_tracker.no_such_thing  # noqa: B018
