"""
api/routes/auth.py -- Registration, login and identity endpoints.

Routes:
  POST /api/auth/register  -- create an account; 201 {userId}
  POST /api/auth/login     -- check credentials; 200 {token}
  GET  /api/auth/me        -- identity bound by the gate (requires token)

Security:
  register and login are rate-limited per client IP (Settings).
  login_user() provides timing equalization -- use it, never inline
  get_by_email() + verify_password().
  Cache-Control: no-store on login responses so tokens are not cached.

Handlers are plain def so FastAPI runs bcrypt on its thread pool.
Errors are raised as core.errors.AppError subclasses and rendered by the
exception handlers in api/main.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import limiter
from api.models import LoginRequest, LoginResponse, MeResponse, RegisterRequest, RegisterResponse
from auth.dependencies import require_identity
from auth.models import Identity
from auth.service import login_user, register_user
from auth.store import UserStore
from auth.tokens import token_expires_in
from core.config import get_settings

_settings = get_settings()

# Auth policy:
# - POST /api/auth/register: public
# - POST /api/auth/login:    public
# - GET  /api/auth/me:       requires bearer token (require_identity)
router = APIRouter()


@limiter.limit(_settings.register_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> RegisterResponse:
    """Create a new account.

    409 when the username or the email is already registered. The UNIQUE
    constraints in the users table back this up under concurrent requests.
    """
    user_store: UserStore = request.app.state.user_store
    user_id = register_user(user_store, body.username, body.email, body.password)
    return RegisterResponse(user_id=user_id)


@limiter.limit(_settings.login_rate_limit)  # brute-force mitigation
@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, response: Response, body: LoginRequest) -> LoginResponse:
    """Exchange email and password for a bearer token valid for two hours.

    Unknown email and wrong password return the same 400 body.
    """
    user_store: UserStore = request.app.state.user_store
    result = login_user(user_store, body.email, body.password)
    response.headers["Cache-Control"] = "no-store"
    return LoginResponse(token=result.token, expires_in=token_expires_in())


@router.get("/auth/me", response_model=MeResponse)
def me(identity: Identity = Depends(require_identity)) -> MeResponse:
    """Return the identity carried by the caller's token."""
    return MeResponse(user_id=identity.user_id, username=identity.username, email=identity.email)
