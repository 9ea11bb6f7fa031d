"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer authentication.

The token issued by POST /auth/login is presented as
"Authorization: Bearer <token>". Verification is stateless: signature plus
iss/aud/exp via TokenIssuer.decode(). No store lookup happens here.

try_get_claims() is the soft variant (returns None on failure).
get_current_claims() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: auth/dependencies.py may import from fastapi because it is part
of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.tokens import TokenIssuer


def try_get_claims(request: Request) -> dict | None:
    """Return verified token claims from the Authorization header, or None."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    issuer: TokenIssuer = request.app.state.token_issuer
    return issuer.decode(auth_header[7:])


def get_current_claims(request: Request) -> dict:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(claims: dict = Depends(get_current_claims)): ...
    """
    claims = try_get_claims(request)
    if claims is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return claims
