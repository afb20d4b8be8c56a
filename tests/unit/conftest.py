"""Conftest for unit tests - mark every test as a unit test."""

import pytest


def pytest_collection_modifyitems(config, items):
    """Mark unit tests, and tests running against the in-memory native library."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "fake_lib" in getattr(item, "fixturenames", ()):
            item.add_marker(pytest.mark.fake_native)
