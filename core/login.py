"""
core/login.py -- Fail-fast login pipeline.

Order: risk check -> credential lookup -> secret verification -> token mint.
Each stage is a gate; the first failure returns a LoginOutcome and no later
stage runs. Expected failures are values, never exceptions.

Collaborators are typed as Protocols so core/ stays free of imports from
auth/. The composition root (api/main.py lifespan) wires the concrete
implementations: core.risk.RiskVerifier, auth.store.CredentialStore,
auth.passwords.BcryptCredentialVerifier and auth.tokens.TokenIssuer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from core.models import (
    CANCELLED_MESSAGE,
    CREDENTIALS_INVALID_MESSAGE,
    IDENTITY_NOT_FOUND_MESSAGE,
    RISK_REJECTED_MESSAGE,
    CredentialRecord,
    LoginErrorKind,
    LoginOutcome,
    LoginRequest,
    RiskVerdict,
)

logger = logging.getLogger("logingate.login")


# ---------------------------------------------------------------------------
# Collaborator contracts
# ---------------------------------------------------------------------------


class RiskCheck(Protocol):
    async def verify(self, assertion: str, expected_action: str) -> RiskVerdict: ...


class CredentialLookup(Protocol):
    def find_by_identifier(self, identifier: str) -> Optional[CredentialRecord]: ...


class CredentialVerifier(Protocol):
    def verify(self, record: CredentialRecord, presented_secret: str) -> bool: ...


class TokenMinter(Protocol):
    def issue(self, subject_id: str, email: str) -> str: ...


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class LoginOrchestrator:
    """Sequences the login stages and maps each failure to a LoginErrorKind.

    decoy: optional record with a real hash in the verifier's scheme. When the
        identifier is unknown the verifier still runs against it, so the
        not-found path does the same hashing work as a wrong password and
        response time does not reveal which accounts exist.

    Holds no per-request state; one instance serves all concurrent logins.
    """

    def __init__(
        self,
        risk: RiskCheck,
        store: CredentialLookup,
        verifier: CredentialVerifier,
        issuer: TokenMinter,
        decoy: Optional[CredentialRecord] = None,
    ) -> None:
        self._risk = risk
        self._store = store
        self._verifier = verifier
        self._issuer = issuer
        self._decoy = decoy

    async def login(self, request: LoginRequest, *, timeout: Optional[float] = None) -> LoginOutcome:
        """Run one login attempt.

        timeout bounds the risk-service call, the only stage that waits on the
        network. Expiry of the timeout, or cancellation of the calling task
        while that call is in flight, yields a CANCELLED outcome. That is the
        only stage where cancellation becomes an outcome: a task cancelled
        during lookup or verification raises CancelledError as usual.
        """
        try:
            verdict = await asyncio.wait_for(
                self._risk.verify(request.risk_assertion, request.intended_action),
                timeout,
            )
        except (asyncio.TimeoutError, asyncio.CancelledError):
            logger.info("Login cancelled during risk verification")
            return LoginOutcome.failure(LoginErrorKind.CANCELLED, CANCELLED_MESSAGE)

        if not verdict.passed:
            logger.info("Login rejected: %s", LoginErrorKind.RISK_REJECTED.value)
            return LoginOutcome.failure(LoginErrorKind.RISK_REJECTED, RISK_REJECTED_MESSAGE)

        # Store and bcrypt work are blocking; keep them off the event loop.
        record = await asyncio.to_thread(self._store.find_by_identifier, request.identifier)
        if record is None:
            if self._decoy is not None:
                await asyncio.to_thread(self._verifier.verify, self._decoy, request.secret)
            logger.info("Login rejected: %s", LoginErrorKind.IDENTITY_NOT_FOUND.value)
            return LoginOutcome.failure(LoginErrorKind.IDENTITY_NOT_FOUND, IDENTITY_NOT_FOUND_MESSAGE)

        if not await asyncio.to_thread(self._verifier.verify, record, request.secret):
            logger.info("Login rejected: %s", LoginErrorKind.CREDENTIALS_INVALID.value)
            return LoginOutcome.failure(LoginErrorKind.CREDENTIALS_INVALID, CREDENTIALS_INVALID_MESSAGE)

        token = self._issuer.issue(str(record.id), record.identifier)
        logger.info("Login succeeded for subject %s", record.id)
        return LoginOutcome.success(token)
