"""
auth/dependencies.py -- FastAPI Depends() helper for the admin bearer token.

Every protected route expects `Authorization: Bearer <token>` where the token
came from POST /login. The gate lives on app.state.auth_gate (wired in the
API lifespan), so tests can swap in a gate with a known key.

get_current_admin() returns the token subject (the admin username) for audit
logging. It does no authorization -- any valid token is enough.

Layer rule: no imports from api/ or catalog/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.tokens import AuthGate, Unauthorized

_BEARER_PREFIX = "Bearer "


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith(_BEARER_PREFIX):
        return None
    return auth_header[len(_BEARER_PREFIX) :].strip() or None


def get_current_admin(request: Request) -> str:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        router = APIRouter(dependencies=[Depends(get_current_admin)])
    or per route:
        async def route(admin: str = Depends(get_current_admin)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Bearer token required."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    gate: AuthGate = request.app.state.auth_gate
    try:
        subject = gate.authenticate(token)
    except Unauthorized:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Invalid or expired token."},
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    request.state.admin = subject
    return subject
