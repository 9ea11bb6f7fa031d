"""
API request and response models for LoginGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py, which
own the internal domain representation. Route handlers map between the two.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.models import MAX_SECRET_BYTES

# Loose shape check only: one "@", no whitespace. Deliverability is not our
# concern and the store matches the string exactly as submitted.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginBody(BaseModel):
    """Request body for POST /api/v1/auth/login.

    recaptcha_token defaults to "" rather than being required so that a
    missing token reaches the pipeline and is reported as a risk rejection,
    the same as any other failed check, instead of as a 422.
    """

    email: str = Field(min_length=1, max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=255)
    recaptcha_token: str = Field(default="", max_length=4096)

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, v: str) -> str:
        # max_length counts characters; bcrypt's limit is in bytes.
        if len(v.encode("utf-8")) > MAX_SECRET_BYTES:
            raise ValueError(f"password must be at most {MAX_SECRET_BYTES} bytes in UTF-8")
        return v


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LoginResponse(BaseModel):
    """Response for a successful POST /api/v1/auth/login."""

    model_config = ConfigDict(frozen=True)

    token: str


class MeResponse(BaseModel):
    """Response for GET /api/v1/auth/me."""

    model_config = ConfigDict(frozen=True)

    subject: str
    email: str
    expires_at: int  # unix seconds, copied from the exp claim


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
