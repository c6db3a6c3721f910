"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from mediarelay.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop the cached Settings so env overrides in a test take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client():
    from mediarelay.main import app

    return TestClient(app)
