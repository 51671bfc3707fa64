"""
tests/conftest.py -- Shared test fixtures for Vibesbook tests.

This module provides:
  - engine: a private in-memory SQLite engine for store/service unit tests
  - user_store / media_store: stores built on that engine
  - api_client: TestClient with a patched lifespan and isolated stores
  - make_token / auth_header: helpers for minting bearer tokens

Design: the API fixture uses a named shared-memory SQLite URI (not plain
:memory:) because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

Environment must be set before any project import: get_settings() is read
at import time by auth.tokens, api.limiter and api.main, and it refuses to
load without SECRET_KEY.
"""

from __future__ import annotations

import os
import tempfile
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime

# CRITICAL: configure the environment before any project import.
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123456789abcdef")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="vibesbook-media-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app
from auth.store import UserStore
from auth.tokens import create_access_token
from core.config import get_settings
from core.database import create_db_engine
from media.hosting import LocalMediaHost
from media.store import MediaStore

# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    eng = create_db_engine("sqlite:///:memory:")
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def media_store(engine: Engine) -> MediaStore:
    return MediaStore(engine)


# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------


def make_token(user_id: int = 1, username: str = "ana", email: str = "ana@x.com", now: datetime | None = None) -> str:
    return create_access_token(user_id, username, email, now=now)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# API fixture
# ---------------------------------------------------------------------------


def _patch_lifespan(engine: Engine):
    """Return an async context manager that replaces the real lifespan.

    Wires a private engine and fresh stores into app.state so TestClient
    routes see an isolated database rather than the configured one.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        settings = get_settings()
        app.state.engine = engine
        app.state.user_store = UserStore(engine)
        app.state.media_store = MediaStore(engine)
        app.state.media_host = LocalMediaHost(settings.media_root, settings.media_base_url)
        yield

    return test_lifespan


@pytest.fixture
def api_client() -> Generator[TestClient, None, None]:
    """Yield a TestClient bound to a brand-new shared-memory database.

    Function-scoped so registration tests never collide on usernames.
    """
    db_url = f"sqlite:///file:test_api_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    eng = create_db_engine(db_url)
    app.router.lifespan_context = _patch_lifespan(eng)

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client

    eng.dispose()


def register_and_login(client: TestClient, username: str, email: str, password: str) -> tuple[int, str]:
    """Register an account through the API and return (user_id, token)."""
    resp = client.post("/api/auth/register", json={"username": username, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    user_id = resp.json()["userId"]
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return user_id, resp.json()["token"]
