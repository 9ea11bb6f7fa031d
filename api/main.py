"""
api/main.py -- FastAPI application entry point for LoginGate.

Exposes the login pipeline over HTTP.

Run with:  uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware    -- adds CORS headers for allowed browser origins
  2. SlowAPIMiddleware -- enforces per-route rate limits from api.limiter

The lifespan is the composition root: every pipeline collaborator is built
there, injected into LoginOrchestrator, and parked on app.state. Nothing is a
module-level singleton except the rate limiter.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from auth.passwords import BcryptCredentialVerifier
from auth.seed import seed_default_users
from auth.store import CredentialStore
from auth.tokens import TokenIssuer
from core.config import get_settings
from core.login import LoginOrchestrator
from core.models import ConfigurationError
from core.risk import RiskVerifier

API_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("logingate.api")


# ---------------------------------------------------------------------------
# Lifespan -- composition root
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the login pipeline on startup and release its resources on shutdown.

    Startup order matters:
      1. Token issuer first -- a signing key under 256 bits raises
         ConfigurationError here, before the DB is touched or any request is
         accepted.
      2. Credential store and seed data.
      3. Risk verifier (owns the outbound HTTP session).
      4. Orchestrator, wired from the three above.
    """
    settings = get_settings()
    logger.info("LoginGate API starting up")

    try:
        issuer = TokenIssuer(
            signing_key=settings.secret_key,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            lifetime_minutes=settings.token_expire_minutes,
        )
    except ConfigurationError:
        logger.critical("Refusing to start: token signing key is misconfigured")
        raise

    verifier = BcryptCredentialVerifier(rounds=settings.bcrypt_rounds)
    store = CredentialStore(settings.database_url)
    if settings.seed_default_users:
        seed_default_users(store, verifier, settings)

    if not settings.recaptcha_secret_key:
        logger.warning("RECAPTCHA_SECRET_KEY is not set -- every risk check will be rejected by the scoring service")
    risk = RiskVerifier(
        secret=settings.recaptcha_secret_key,
        threshold=settings.recaptcha_threshold,
        verify_url=settings.recaptcha_verify_url,
        timeout=settings.recaptcha_timeout_seconds,
    )

    app.state.settings = settings
    app.state.token_issuer = issuer
    app.state.credential_store = store
    app.state.login_orchestrator = LoginOrchestrator(
        risk=risk,
        store=store,
        verifier=verifier,
        issuer=issuer,
        decoy=verifier.decoy_record(),
    )
    logger.info("Login pipeline initialized (threshold=%.2f)", settings.recaptcha_threshold)

    yield

    # Shutdown
    risk.close()
    store.close()
    logger.info("LoginGate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="LoginGate API",
    description="Login with reCAPTCHA v3 risk scoring, bcrypt credentials and JWT bearer tokens.",
    version=API_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Register in the order you want the request to encounter them: CORS -> SlowAPI.
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost", "http://localhost:3000", "http://127.0.0.1"],
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request passes through this coroutine before reaching any route
# handler. Latency is wall-clock time around call_next.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded.

    Retry-After is the length of the breached window, an upper bound on the wait.
    """
    retry_after = exc.limit.limit.get_expiry()
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="rate_limited",
                message="Too many requests.",
                detail=str(exc),
            )
        ).model_dump(),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or query params fail validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI HTTP exceptions.

    When detail is already a structured dict, use it directly as the error
    field rather than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# No rate limit applied -- health checks from load balancers and monitoring
# systems must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=API_VERSION)
