"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))


from tests.fixtures.fake_native import FakeXapianLibrary
from xapian_bridge import native
from xapian_bridge.config import reset_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop XAPIAN_BRIDGE_* variables and cached settings around each test."""
    for key in list(os.environ):
        if key.upper().startswith("XAPIAN_BRIDGE_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def fake_lib():
    """Install an in-memory native library for the duration of a test."""
    lib = FakeXapianLibrary()
    native.set_library(lib)
    yield lib
    native.reset_library()
