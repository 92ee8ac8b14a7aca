"""Shared test fixtures.

Settings are cached process-wide; every test gets a fresh read so env
overrides made with ``monkeypatch`` take effect.
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from tabspace.background.settings import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate tests from the developer's TABSPACE_* environment."""
    for key in list(os.environ):
        if key.startswith("TABSPACE_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
