"""
tests/conftest.py -- Shared test fixtures for LoginGate.

This module provides:
  - verifier / issuer / store: real pipeline collaborators with fast settings
    (bcrypt rounds=4, fixed signing key, named shared-memory SQLite)
  - risk_reply: factory for fake scoring-service HTTP responses
  - api_client: TestClient wired to a patched lifespan with a mocked
    outbound requests session

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because the orchestrator runs store lookups via asyncio.to_thread and
TestClient runs handlers off the main thread. Plain :memory: DBs are
per-connection and would present a blank schema to each worker thread.

The DEBUG env var must be set before any app import so get_settings()
auto-generates SECRET_KEY in dev mode instead of raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from unittest.mock import MagicMock

# CRITICAL: Set DEBUG before any core/api import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
import requests
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.passwords import BcryptCredentialVerifier
from auth.store import CredentialStore
from auth.tokens import TokenIssuer
from core.config import get_settings
from core.login import LoginOrchestrator
from core.risk import RiskVerifier

TEST_SIGNING_KEY = "test-signing-key-0123456789abcdef-0123456789"
TEST_ISSUER = "logingate-test"
TEST_AUDIENCE = "logingate-test-clients"
TEST_LIFETIME_MINUTES = 30
TEST_RISK_SECRET = "test-recaptcha-secret"
TEST_VERIFY_URL = "https://risk.example.test/siteverify"

KNOWN_EMAIL = "alice@example.com"
KNOWN_PASSWORD = "correct-horse-battery"


def memory_db_url(name: str) -> str:
    return f"sqlite:///file:{name}?mode=memory&cache=shared&uri=true"


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def verifier() -> BcryptCredentialVerifier:
    # Minimum bcrypt cost keeps the suite fast; the algorithm is unchanged.
    return BcryptCredentialVerifier(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SIGNING_KEY, TEST_ISSUER, TEST_AUDIENCE, TEST_LIFETIME_MINUTES)


@pytest.fixture
def store(verifier: BcryptCredentialVerifier) -> Generator[CredentialStore, None, None]:
    """Fresh store holding one known account; a unique DB name per test."""
    s = CredentialStore(memory_db_url(f"test_store_{uuid.uuid4().hex}"))
    s.create_user(KNOWN_EMAIL, verifier.hash_secret(KNOWN_PASSWORD), "User")
    yield s
    s.close()


@pytest.fixture
def risk_reply() -> Callable[..., MagicMock]:
    """Return a factory for fake requests.Response objects from the scoring service."""

    def _make(success: bool = True, score: float = 0.9, action: str = "login", status: int = 200) -> MagicMock:
        resp = MagicMock()
        resp.status_code = status
        resp.json.return_value = {"success": success, "score": score, "action": action, "error-codes": []}
        if status >= 400:
            resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Client Error")
        return resp

    return _make


@pytest.fixture
def risk_session(risk_reply) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.post.return_value = risk_reply()
    return session


@pytest.fixture
def risk_verifier(risk_session: MagicMock) -> RiskVerifier:
    return RiskVerifier(
        secret=TEST_RISK_SECRET,
        threshold=0.5,
        verify_url=TEST_VERIFY_URL,
        session=risk_session,
    )


@pytest.fixture(autouse=True)
def _reset_rate_limits() -> None:
    """Clear slowapi's in-memory counters so each test starts a fresh window."""
    limiter.reset()


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------


def _patch_lifespan(store: CredentialStore, orchestrator: LoginOrchestrator, issuer: TokenIssuer):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-built collaborators into app.state so TestClient routes hit the
    real pipeline against an isolated DB and a mocked outbound session.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = get_settings()
        app.state.token_issuer = issuer
        app.state.credential_store = store
        app.state.login_orchestrator = orchestrator
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, MagicMock, TokenIssuer], None, None]:
    """Yield (client, risk_session, issuer) for API integration tests.

    risk_session is the MagicMock standing in for the outbound requests
    session; tests set risk_session.post.return_value / side_effect to script
    the scoring service. The store holds KNOWN_EMAIL / KNOWN_PASSWORD.
    """
    bcrypt_verifier = BcryptCredentialVerifier(rounds=4)
    store = CredentialStore(memory_db_url(f"test_auth_{request.module.__name__}"))
    store.create_user(KNOWN_EMAIL, bcrypt_verifier.hash_secret(KNOWN_PASSWORD), "User")
    issuer = TokenIssuer(TEST_SIGNING_KEY, TEST_ISSUER, TEST_AUDIENCE, TEST_LIFETIME_MINUTES)

    session = MagicMock(spec=requests.Session)
    risk = RiskVerifier(secret=TEST_RISK_SECRET, threshold=0.5, verify_url=TEST_VERIFY_URL, session=session)
    orchestrator = LoginOrchestrator(
        risk=risk,
        store=store,
        verifier=bcrypt_verifier,
        issuer=issuer,
        decoy=bcrypt_verifier.decoy_record(),
    )

    app.router.lifespan_context = _patch_lifespan(store, orchestrator, issuer)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, session, issuer

    store.close()
