"""
core/risk.py -- Bot-risk verification against the reCAPTCHA v3 siteverify API.

One form-encoded POST per login, no retries. Every failure mode (empty token,
non-2xx reply, transport error, malformed body, wrong action, low score,
success=false) collapses into the same rejected verdict so callers cannot be
used as an oracle for tuning a bot. The concrete cause goes to the log only.

Cancellation: the blocking requests call runs in a worker thread via
asyncio.to_thread. CancelledError raised while awaiting it is NOT caught here;
it propagates to the orchestrator, which reports it as a cancellation rather
than a risk rejection.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import requests
from pydantic import BaseModel, ConfigDict, Field

from core.models import RiskVerdict

logger = logging.getLogger("logingate.risk")


class RiskServiceResponse(BaseModel):
    """JSON body returned by the scoring service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    score: float = Field(default=0.0, allow_inf_nan=False)
    action: str = ""
    # Advisory only; never consulted by the pass/fail policy.
    error_codes: list[str] = Field(default_factory=list, alias="error-codes")


class RiskVerifier:
    """Scores a client risk assertion and applies the pass/fail policy.

    Usage:
        verifier = RiskVerifier(secret="...", threshold=0.5)
        verdict = await verifier.verify(token, "login")
    """

    def __init__(
        self,
        secret: str,
        threshold: float,
        verify_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._secret = secret
        self._threshold = threshold
        self._verify_url = verify_url
        self._timeout = timeout
        if session is None:
            session = requests.Session()
            # Known endpoint; a long redirect chain is never legitimate.
            session.max_redirects = 3
        self._session = session

    async def verify(self, assertion: str, expected_action: str) -> RiskVerdict:
        if not assertion or not assertion.strip():
            logger.info("Risk check rejected: empty assertion, no service call made")
            return RiskVerdict.rejected()

        reply = await asyncio.to_thread(self._submit, assertion)
        if reply is None:
            return RiskVerdict.rejected()

        if not reply.success:
            logger.info("Risk check rejected: service reported failure %s", reply.error_codes)
            return RiskVerdict.rejected()
        if reply.action != expected_action:
            logger.info("Risk check rejected: action %r != expected %r", reply.action, expected_action)
            return RiskVerdict.rejected()
        # Written as "not >=" so an unordered score can never pass.
        if not reply.score >= self._threshold:
            logger.info("Risk check rejected: score %.2f below threshold %.2f", reply.score, self._threshold)
            return RiskVerdict.rejected()
        return RiskVerdict.ok()

    def _submit(self, assertion: str) -> Optional[RiskServiceResponse]:
        """POST the assertion and parse the reply. Returns None on any failure."""
        try:
            resp = self._session.post(
                self._verify_url,
                data={"secret": self._secret, "response": assertion},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            return RiskServiceResponse.model_validate(resp.json())
        except requests.RequestException as e:
            logger.warning("Risk service call failed: %s", e)
        except ValueError as e:
            # Non-JSON body, or pydantic ValidationError (a ValueError subclass).
            logger.warning("Risk service returned an unreadable body: %s", e)
        return None

    def close(self) -> None:
        self._session.close()
