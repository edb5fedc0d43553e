"""
Shared fixtures for the Networking Coach tests.

The database URL is pointed at a throwaway SQLite file before any project
module is imported, since the engine is created at import time.
"""

import os
import sys
import tempfile
from unittest.mock import MagicMock

import pytest

_DB_DIR = tempfile.mkdtemp(prefix="networking-coach-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"

# Add project to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture(autouse=True)
def fresh_db():
    """Recreate all tables for every test."""
    from networking_coach.database import drop_db, init_db

    drop_db()
    init_db()
    yield


@pytest.fixture
def make_user():
    """Factory that registers a user and returns it."""
    from networking_coach.auth import create_user

    def _make(email="student@example.edu", password="password123", full_name="Alex Student"):
        user, error = create_user(email, password, full_name)
        assert error is None
        return user

    return _make


@pytest.fixture
def client():
    """Flask test client with a clean rate limiter."""
    import api_server

    api_server.rate_limit_cache.clear()
    api_server.app.config["TESTING"] = True
    return api_server.app.test_client()


@pytest.fixture
def auth_headers(make_user):
    """Bearer headers for a freshly registered user."""
    from networking_coach.auth import create_access_token

    def _headers(email="student@example.edu"):
        user = make_user(email=email)
        token = create_access_token(user.id, user.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def openai_client():
    """Mock OpenAI client answering with a fixed message."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = (
        "  Hi Sarah, I'd love to connect and hear about your work at Microsoft.  "
    )
    mock_client = MagicMock()
    mock_client.chat.completions.create.return_value = response
    return mock_client
