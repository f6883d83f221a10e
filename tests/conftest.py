# tests/conftest.py

"""Shared pytest fixtures for all tests."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from grocery_compare.config.settings import Settings


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so retry loops run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def no_backend_credentials() -> Generator[None, None, None]:
    """Ignore Supabase credentials a local .env may have loaded."""
    with patch.object(Settings, "SUPABASE_URL", ""), patch.object(
        Settings, "SUPABASE_ANON_KEY", ""
    ):
        yield


@pytest.fixture(autouse=True)
def default_name_matcher() -> Generator[None, None, None]:
    """Ignore a NAME_MATCHER override from a local .env."""
    with patch.object(Settings, "NAME_MATCHER", "substring"):
        yield
