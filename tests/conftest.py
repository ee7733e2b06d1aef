"""Shared fixtures: temporary stores and a no-op sleep."""
from unittest.mock import AsyncMock

import pytest

from infrastructure.repositories import MatchCacheStore, SettingsStore


@pytest.fixture
def settings_store(tmp_path):
    store = SettingsStore(tmp_path / "settings.sqlite")
    yield store
    store.close()


@pytest.fixture
def cache_store(tmp_path, settings_store):
    return MatchCacheStore(tmp_path / "match_cache.sqlite", legacy_source=settings_store)


@pytest.fixture
def no_sleep():
    return AsyncMock(return_value=None)
