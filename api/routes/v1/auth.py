"""
api/routes/v1/auth.py -- Registration, login and identity endpoints.

Routes:
  POST /api/v1/auth/register   -- self-registration; always creates an employee
  POST /api/v1/auth/login      -- email/password login; returns a bearer token
  GET  /api/v1/auth/me         -- identity behind the presented token (requires auth)

Security:
  [H2] POST /login is rate-limited per IP (Settings.login_rate_limit).
  [C1] AuthService.login() equalizes timing between unknown email and wrong
       password -- never inline find_by_email() + verify() here.
  [M5] Cache-Control: no-store on every login response, success or failure.
  Self-registration cannot choose a role. Admins create trainers and admins
  through POST /api/v1/users.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import LoginRequest, LoginResponse, MeResponse, RegisterRequest, UserResponse
from auth.dependencies import get_auth_service, get_current_claims
from auth.errors import AuthenticationError
from auth.models import TokenClaims
from auth.roles import Role
from auth.service import AuthService
from core.config import get_settings

# Auth policy:
# - POST /api/v1/auth/register: public -- gated by SELF_REGISTRATION_ENABLED
# - POST /api/v1/auth/login:    public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/me:       requires auth (get_current_claims)
router = APIRouter()


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(
    request: Request,
    body: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Create an employee account. The password hash is never returned."""
    if not request.app.state.settings.self_registration_enabled:
        raise HTTPException(
            status_code=403,
            detail={"code": "registration_disabled", "message": "Self-registration is disabled."},
        )
    user = service.register(body.name, body.email, body.password, Role.employee)
    return UserResponse.from_user(user)


@limiter.limit(get_settings().login_rate_limit)  # [H2] must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a bearer token.

    Wrong email and wrong password produce the same 401 body.
    """
    service: AuthService = request.app.state.auth_service
    try:
        result = service.login(body.email, body.password)
    except AuthenticationError:
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": AuthenticationError.code, "message": "Invalid credentials."}},
            headers={"WWW-Authenticate": "Bearer"},
        )
        resp.headers["Cache-Control"] = "no-store"  # [M5]
        return resp

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=result.token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=service.token_expire_seconds,
            user_id=result.subject,
            role=result.role,
        ).model_dump(mode="json"),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.get("/auth/me", response_model=MeResponse)
def me(
    claims: TokenClaims = Depends(get_current_claims),
    service: AuthService = Depends(get_auth_service),
) -> MeResponse:
    """Return the token's claims together with the current account record.

    role is the role baked into the token, which can differ from user.role if
    the account was changed after the token was issued.
    """
    user = service.get_user(claims.subject)
    return MeResponse(
        user_id=claims.subject,
        role=claims.role,
        expires_at=claims.expires_at.isoformat(),
        user=UserResponse.from_user(user),
    )
