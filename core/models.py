"""
core/models.py -- Domain dataclasses for the login pipeline.

Pure data containers. The orchestrator (core/login.py) and its collaborators
(core/risk.py, auth/) produce and consume these; api/models.py owns the HTTP
contract and route handlers map between the two.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

LOGIN_ACTION = "login"

RISK_FAILURE_REASON = "risk validation failed"

# bcrypt reads at most 72 bytes of a secret; longer secrets are refused
# everywhere rather than silently truncated.
MAX_SECRET_BYTES = 72

RISK_REJECTED_MESSAGE = "The reCAPTCHA validation failed."
IDENTITY_NOT_FOUND_MESSAGE = "User not found."
CREDENTIALS_INVALID_MESSAGE = "Invalid email or password."
CANCELLED_MESSAGE = "The login request was cancelled."


# ---------------------------------------------------------------------------
# Requests and records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoginRequest:
    identifier: str  # email, matched exactly
    secret: str
    risk_assertion: str  # opaque token from the client-side reCAPTCHA widget
    intended_action: str = LOGIN_ACTION

    def __repr__(self) -> str:
        # Keep the secret and the assertion out of logs and tracebacks.
        return f"LoginRequest(identifier={self.identifier!r}, intended_action={self.intended_action!r})"


@dataclass(frozen=True)
class CredentialRecord:
    """One stored account. Owned by auth.store.CredentialStore; read-only here."""

    id: int
    identifier: str
    secret_hash: str
    role: str


@dataclass(frozen=True)
class RiskVerdict:
    passed: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> RiskVerdict:
        return cls(passed=True)

    @classmethod
    def rejected(cls) -> RiskVerdict:
        return cls(passed=False, reason=RISK_FAILURE_REASON)


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


class LoginErrorKind(str, Enum):
    RISK_REJECTED = "risk_rejected"
    IDENTITY_NOT_FOUND = "identity_not_found"
    CREDENTIALS_INVALID = "credentials_invalid"
    CANCELLED = "cancelled"
    CONFIGURATION_FATAL = "configuration_fatal"


@dataclass(frozen=True)
class LoginError:
    kind: LoginErrorKind
    description: str


@dataclass(frozen=True)
class LoginOutcome:
    """Result of one login attempt: exactly one of token / error is set.

    Expected failures (bad password, low risk score) travel as values so the
    caller can map kinds to status codes without try/except.
    """

    token: Optional[str] = None
    error: Optional[LoginError] = None

    def __post_init__(self) -> None:
        if (self.token is None) == (self.error is None):
            raise ValueError("LoginOutcome requires exactly one of token or error")

    @classmethod
    def success(cls, token: str) -> LoginOutcome:
        return cls(token=token)

    @classmethod
    def failure(cls, kind: LoginErrorKind, description: str) -> LoginOutcome:
        return cls(error=LoginError(kind=kind, description=description))

    @property
    def is_error(self) -> bool:
        return self.error is not None


class ConfigurationError(ValueError):
    """Fatal startup misconfiguration (e.g. a signing key under 256 bits).

    Raised at construction time only. Never returned as a LoginOutcome.
    """

    kind = LoginErrorKind.CONFIGURATION_FATAL
