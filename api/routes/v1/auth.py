"""
api/routes/v1/auth.py -- Authentication REST endpoints.

Routes:
  POST /api/v1/auth/login   -- reCAPTCHA + password login; returns a bearer token
  GET  /api/v1/auth/me      -- decoded claims of the presented bearer token

Security:
  POST /login is rate-limited per client IP (LOGIN_RATE_LIMIT, default 5/minute).
  The intended action is fixed to "login" server-side; clients cannot pick
  which reCAPTCHA action their token is checked against.
  Cache-Control: no-store on every login response, success or failure.

Status mapping lives here and only here. The pipeline returns abstract error
kinds; this module decides what the client sees.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, LoginBody, LoginResponse, MeResponse
from auth.dependencies import get_current_claims
from core.config import Settings, get_settings
from core.login import LoginOrchestrator
from core.models import LOGIN_ACTION, LoginError, LoginErrorKind, LoginRequest

# Auth policy:
# - POST /api/v1/auth/login: public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/me:    requires a valid bearer token (get_current_claims)
router = APIRouter()

# Risk, not-found and bad-password all answer 400, matching what existing
# clients of the service already handle. Only the message differs.
_STATUS_BY_KIND: dict[LoginErrorKind, int] = {
    LoginErrorKind.RISK_REJECTED: 400,
    LoginErrorKind.IDENTITY_NOT_FOUND: 400,
    LoginErrorKind.CREDENTIALS_INVALID: 400,
    LoginErrorKind.CANCELLED: 503,
}


def _login_rate_limit() -> str:
    return get_settings().login_rate_limit


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/auth/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
# Innermost, so the router registers the rate-limited wrapper.
@limiter.limit(_login_rate_limit)
async def login(request: Request, body: LoginBody) -> JSONResponse:
    """Run the login pipeline and return a signed bearer token.

    Order: reCAPTCHA check, account lookup, password check, token mint.
    The first failing step decides the error; later steps never run.
    """
    orchestrator: LoginOrchestrator = request.app.state.login_orchestrator
    settings: Settings = request.app.state.settings

    attempt = LoginRequest(
        identifier=body.email,
        secret=body.password,
        risk_assertion=body.recaptcha_token,
        intended_action=LOGIN_ACTION,
    )
    outcome = await orchestrator.login(attempt, timeout=settings.login_timeout_seconds)

    if outcome.error is not None:
        resp = _error_response(outcome.error)
    else:
        resp = JSONResponse(status_code=200, content=LoginResponse(token=outcome.token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=MeResponse)
async def me(claims: dict = Depends(get_current_claims)) -> MeResponse:
    """Return the identity asserted by the presented bearer token."""
    return MeResponse(
        subject=str(claims["sub"]),
        email=str(claims.get("email", "")),
        expires_at=int(claims["exp"]),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error_response(error: LoginError) -> JSONResponse:
    return JSONResponse(
        status_code=_STATUS_BY_KIND.get(error.kind, 400),
        content=ErrorResponse(
            error=ErrorDetail(code=error.kind.value, message=error.description),
        ).model_dump(),
    )
