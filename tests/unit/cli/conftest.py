"""Fixtures for CLI tests."""

from __future__ import annotations

import pytest

from quickscan.app.settings import get_app_settings
from quickscan.auth import get_auth_settings
from quickscan.files import get_file_settings
from quickscan.storage import get_storage_settings

_CACHED = (get_app_settings, get_auth_settings, get_file_settings, get_storage_settings)


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    """Rich styling differs with and without a TTY; keep help text plain."""
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.setenv("TERM", "dumb")


@pytest.fixture(autouse=True)
def fresh_settings():
    for getter in _CACHED:
        getter.cache_clear()
    yield
    for getter in _CACHED:
        getter.cache_clear()
