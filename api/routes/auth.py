"""
api/routes/auth.py -- Admin login endpoint.

Routes:
  POST /login  -- exchange the admin username/password for a bearer token

Security:
  POST /login is rate-limited (LOGIN_RATE_LIMIT, default 10/minute per IP).
  Wrong username and wrong password produce the same "bad_credentials" error.
  Cache-Control: no-store on every login response so the token is never cached.

There is no logout endpoint: tokens are stateless and stay valid until they
expire. The frontend "logs out" by discarding its copy.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, LoginRequest, LoginResponse
from auth.tokens import AuthGate, InvalidCredentials
from core.config import get_settings

# Auth policy:
# - POST /login: public -- the login endpoint must be unauthenticated
router = APIRouter()


def _login_rate_limit() -> str:
    return get_settings().login_rate_limit


@limiter.limit(_login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Validate the admin credentials and return a signed token valid for the TTL."""
    gate: AuthGate = request.app.state.auth_gate
    try:
        token = gate.login(body.username, body.password)
    except InvalidCredentials:
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse(
                error=ErrorDetail(code="bad_credentials", message="Invalid username or password.")
            ).model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(status_code=200, content=LoginResponse(token=token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp
