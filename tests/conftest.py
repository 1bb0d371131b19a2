"""
Pytest configuration and shared fixtures
"""

import pytest

from haystackfi.api.config import reset_settings
from haystackfi.api.services.cache_service import reset_cache_service
from haystackfi.db.session import reset_engine


@pytest.fixture
def api_env(tmp_path, monkeypatch):
    """
    Point the service at a throwaway SQLite database.

    Caching and mock seeding are off; bcrypt uses the minimum cost.
    """
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'haystackfi-test.db'}")
    monkeypatch.setenv("API_ENABLE_CACHE", "false")
    monkeypatch.setenv("SEED_MOCK_DATA", "false")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret-key")
    reset_settings()
    reset_engine()
    reset_cache_service()

    yield tmp_path

    reset_engine()
    reset_settings()
    reset_cache_service()


@pytest.fixture
def signup_payload():
    """Valid sign-up body for a bank user."""
    return {
        "email": "Jane.Doe@FirstNational.com",
        "password": "Secur3Pass",
        "role": "bank",
        "firstName": "Jane",
        "lastName": "Doe",
        "institutionName": "First National Bank",
        "title": "CIO",
        "state": "TX",
    }
