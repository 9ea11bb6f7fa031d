"""
auth/tokens.py -- Signed bearer-token issuance.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry sub, email, jti, iss, aud, iat and
       exp. The issuer keeps no per-token state; validity is purely signature
       plus registered claims at decode time.

  jti: a fresh uuid4 per token, so two tokens minted for the same user in the
       same second are still distinguishable (replay detection, future
       revocation lists).

  Key length: HMAC-SHA256 relies on key entropy. A key shorter than 32 bytes
       (256 bits) is rejected in __init__ with ConfigurationError. The API
       lifespan constructs the issuer before serving, so a short key stops the
       process at startup rather than failing on the first login.

Layer rule: may import core.models; never api/.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from core.models import ConfigurationError

logger = logging.getLogger("logingate.tokens")

_ALGORITHM = "HS256"

MIN_KEY_BYTES = 32
DEFAULT_LIFETIME_MINUTES = 60


class TokenIssuer:
    """Mint and verify HS256 access tokens.

    Usage:
        issuer = TokenIssuer(settings.secret_key, "logingate", "logingate-clients", 60)
        token = issuer.issue("42", "admin@example.com")
        claims = issuer.decode(token)
    """

    def __init__(
        self,
        signing_key: str,
        issuer: str,
        audience: str,
        lifetime_minutes: Optional[int] = None,
    ) -> None:
        if not signing_key or len(signing_key.encode("utf-8")) < MIN_KEY_BYTES:
            raise ConfigurationError(f"The JWT signing key must be at least {MIN_KEY_BYTES} bytes long (256 bits).")
        self._key = signing_key
        self.issuer = issuer
        self.audience = audience
        minutes = lifetime_minutes if lifetime_minutes and lifetime_minutes > 0 else DEFAULT_LIFETIME_MINUTES
        self.lifetime = timedelta(minutes=minutes)

    def issue(self, subject_id: str, email: str) -> str:
        """Encode a signed JWT for a verified identity."""
        now = datetime.now(timezone.utc)
        claims = {
            "sub": subject_id,
            "email": email,
            "jti": uuid.uuid4().hex,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + self.lifetime,
        }
        return jwt.encode(claims, self._key, algorithm=_ALGORITHM)

    def decode(self, token: str) -> dict | None:
        """Decode and verify a JWT. Returns the claims dict or None on any failure.

        Checks signature, expiry, issuer and audience. Route dependencies turn
        None into 401.
        """
        try:
            return jwt.decode(
                token,
                self._key,
                algorithms=[_ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
            )
        except JWTError as e:
            logger.debug("Token rejected: %s", e)
            return None
