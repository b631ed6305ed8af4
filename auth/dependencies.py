"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The access layer sits between the router and every protected handler:

  get_auth_service()   -- the AuthService wired in app.state by the lifespan.
  get_current_claims() -- reads "Authorization: Bearer <token>", delegates to
                          AuthService.verify_token(), and returns TokenClaims.
                          Missing or invalid tokens raise 401 before the
                          handler body runs.
  require_role(role)   -- dependency factory; 403 unless the caller's role
                          reaches `role` in the reachability table.

Identity comes from the token alone. The store is not consulted, so a token
keeps its role until it expires even if the account changed meanwhile.

Layer rule: auth/dependencies.py may import from fastapi because it is part
of the FastAPI dependency injection system. It does not import from api/.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, HTTPException, Request

from auth.errors import AuthenticationError
from auth.models import TokenClaims
from auth.roles import Role, can_act
from auth.service import AuthService

_UNAUTHORIZED = {"code": "unauthorized", "message": "Authentication required."}


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_current_claims(request: Request) -> TokenClaims:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(claims: TokenClaims = Depends(get_current_claims)): ...
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail=_UNAUTHORIZED, headers={"WWW-Authenticate": "Bearer"})
    service = get_auth_service(request)
    try:
        claims = service.verify_token(auth_header)
    except AuthenticationError:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Invalid token."},
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    request.state.user_id = claims.subject
    request.state.role = claims.role
    return claims


def require_role(required: Role) -> Callable[..., TokenClaims]:
    """Build a dependency that admits callers whose role reaches `required`.

        @router.delete("/users/{user_id}")
        async def route(claims: TokenClaims = Depends(require_role(Role.admin))): ...
    """

    def dependency(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if not can_act(claims.role, required):
            raise HTTPException(
                status_code=403,
                detail={"code": "forbidden", "message": f"{required.value.capitalize()} access required."},
            )
        return claims

    return dependency


require_admin = require_role(Role.admin)
