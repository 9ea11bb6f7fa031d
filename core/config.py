"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for LoginGate happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY, recaptcha_threshold -> RECAPTCHA_THRESHOLD).

  @model_validator(mode="after"): Runs the DEBUG-conditional SECRET_KEY logic:
      dev mode generates a key with a warning, production mode refuses to start
      without one.

Security notes:
  The signing-key LENGTH rule (>= 32 bytes) is enforced by auth.tokens.TokenIssuer
  at construction, not here, so the issuer refuses a short key no matter where
  the key came from. The lifespan constructs the issuer before serving traffic.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.models import MAX_SECRET_BYTES

logger = logging.getLogger("logingate.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'auth' / 'logingate_auth.db'}"

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = Field(default="", repr=False)

    # ------------------------------------------------------------------
    # Token issuance
    # ------------------------------------------------------------------

    jwt_issuer: str = "logingate"
    jwt_audience: str = "logingate-clients"
    # Non-positive values fall back to 60 minutes inside TokenIssuer.
    token_expire_minutes: int = 60

    # ------------------------------------------------------------------
    # Risk scoring (reCAPTCHA v3)
    # ------------------------------------------------------------------

    recaptcha_secret_key: str = Field(default="", repr=False)
    recaptcha_site_key: str = ""
    recaptcha_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    recaptcha_verify_url: str = RECAPTCHA_VERIFY_URL
    recaptcha_timeout_seconds: float = 10.0

    # ------------------------------------------------------------------
    # Login endpoint
    # ------------------------------------------------------------------

    login_timeout_seconds: float = 15.0
    login_rate_limit: str = "5/minute"

    # ------------------------------------------------------------------
    # Persistence and seed data
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    seed_default_users: bool = True
    seed_admin_email: str = "admin@example.com"
    seed_admin_password: str = Field(default="Admin@123", repr=False)
    seed_admin_role: str = "Admin"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("seed_admin_password")
    @classmethod
    def validate_seed_admin_password(cls, v: str) -> str:
        """Refuse a seed password bcrypt cannot hash without truncation."""
        if len(v.encode("utf-8")) > MAX_SECRET_BYTES:
            raise ValueError(f"SEED_ADMIN_PASSWORD must be at most {MAX_SECRET_BYTES} bytes in UTF-8.")
        return v

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY presence policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Issued tokens will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("WARNING: Using auto-generated SECRET_KEY. Tokens will not verify across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
