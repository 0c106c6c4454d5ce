# tests/conftest.py
"""
Shared fixtures: a Config pointing at a throwaway SQLite file, a fresh app per
test, and helpers for getting a bearer token.
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

# Add the project root to sys.path
PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from cleaning_checklist.api.server import create_app
from cleaning_checklist.config import Config


TEST_SECRET = "test-secret-key-for-testing-only"


@pytest.fixture
def cfg(tmp_path):
    return Config(
        APP_ENV="testing",
        DB_DSN=str(tmp_path / "checklist.sqlite"),
        AUTH_JWT_SECRET=TEST_SECRET,
    )


@pytest.fixture
def app(cfg):
    return create_app(cfg)


@pytest.fixture
def client(app):
    # Entering the context runs startup, which creates the schema.
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signup_and_login(client):
    def _go(email="user@example.com", password="s3cret-pass"):
        r = client.post("/api/signup", json={"email": email, "password": password})
        assert r.status_code == 201, r.text
        r = client.post("/api/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return r.json()["token"]

    return _go


@pytest.fixture
def auth_headers(signup_and_login):
    """Headers for an authenticated request."""
    return {"Authorization": f"Bearer {signup_and_login()}"}
