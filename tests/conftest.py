"""
tests/conftest.py -- Shared test fixtures for the training portal test suite.

This module provides:
  - settings: the Settings singleton built from the test environment below
  - hasher / issuer: auth primitives configured from those settings
  - store: a fresh in-memory UserStore per test
  - service: an AuthService over that store
  - api_client: TestClient wired to an isolated store, plus tokens for an
    admin, a trainer and an employee

Design: the API fixture uses a named shared-memory SQLite URI (not plain
:memory:) because TestClient runs sync route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread.

Environment must be set before any application import:
  DEBUG=true           get_settings() auto-generates SECRET_KEY
  BCRYPT_ROUNDS=4      keeps bcrypt fast enough for a test suite
  RATE_LIMIT_ENABLED   off, so repeated logins never trip the 10/minute limit
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any auth/core/api import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.passwords import PasswordHasher
from auth.roles import Role
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import Settings, get_settings

ADMIN_EMAIL = "admin@portal.example.com"
ADMIN_PASSWORD = "adminpass123"
TRAINER_EMAIL = "trainer@portal.example.com"
TRAINER_PASSWORD = "trainerpass123"
EMPLOYEE_EMAIL = "employee@portal.example.com"
EMPLOYEE_PASSWORD = "employeepass123"


@pytest.fixture(scope="session")
def settings() -> Settings:
    return get_settings()


@pytest.fixture(scope="session")
def hasher(settings: Settings) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


@pytest.fixture(scope="session")
def issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer(secret_key=settings.secret_key, expire_seconds=settings.token_expire_seconds)


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def service(store: UserStore, hasher: PasswordHasher, issuer: TokenIssuer) -> AuthService:
    return AuthService(store=store, hasher=hasher, issuer=issuer)


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


def _patch_lifespan(settings: Settings, user_store: UserStore, service: AuthService):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-built test store and service into app.state so TestClient
    routes see an isolated database rather than the configured one.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = settings
        app.state.user_store = user_store
        app.state.auth_service = service
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(settings: Settings, hasher: PasswordHasher, issuer: TokenIssuer):
    """Yield (client, tokens) where tokens maps role name -> (user_id, bearer token).

    Users are created before the client starts:
      admin    ADMIN_EMAIL / ADMIN_PASSWORD
      trainer  TRAINER_EMAIL / TRAINER_PASSWORD
      employee EMPLOYEE_EMAIL / EMPLOYEE_PASSWORD
    """
    db_url = f"sqlite:///file:test_auth_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    user_store = UserStore(db_url)
    service = AuthService(store=user_store, hasher=hasher, issuer=issuer)

    tokens: dict[str, tuple[str, str]] = {}
    for role, email, password in (
        (Role.admin, ADMIN_EMAIL, ADMIN_PASSWORD),
        (Role.trainer, TRAINER_EMAIL, TRAINER_PASSWORD),
        (Role.employee, EMPLOYEE_EMAIL, EMPLOYEE_PASSWORD),
    ):
        user = service.register(f"Test {role.value}", email, password, role)
        tokens[role.value] = (user.id, issuer.issue(user.id, user.role))

    app.router.lifespan_context = _patch_lifespan(settings, user_store, service)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, tokens

    user_store.close()
