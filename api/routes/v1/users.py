"""
api/routes/v1/users.py -- User account management endpoints.

Routes:
  POST   /api/v1/users                  -- create user with any role (admin only)
  GET    /api/v1/users                  -- list users (trainer or admin)
  GET    /api/v1/users/{id}             -- one user (self, trainer or admin)
  PUT    /api/v1/users/{id}             -- update name/email (self or admin); role (admin only)
  PUT    /api/v1/users/{id}/password    -- change password (self or admin)
  DELETE /api/v1/users/{id}             -- delete user (admin only)

Authorization goes through auth.roles.can_act(); "self" means the token's
subject equals the path id. Responses use UserResponse, which has no
password field.

Security:
  [M4] An admin cannot delete their own account through this API.
  Changing a password or role does not revoke tokens already issued.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from api.models import MessageResponse, PasswordUpdate, UserCreate, UserResponse, UserUpdate
from auth.dependencies import get_auth_service, get_current_claims, require_admin, require_role
from auth.errors import PermissionDeniedError
from auth.models import TokenClaims
from auth.roles import Role, can_act
from auth.service import AuthService

# Auth policy:
# - POST   /api/v1/users:                 requires admin (require_admin)
# - GET    /api/v1/users:                 requires trainer reach (require_role(Role.trainer))
# - GET    /api/v1/users/{id}:            self, or trainer reach
# - PUT    /api/v1/users/{id}:            self or admin; role change admin only
# - PUT    /api/v1/users/{id}/password:   self or admin
# - DELETE /api/v1/users/{id}:            requires admin, not self
router = APIRouter()


def _require_self_or(claims: TokenClaims, user_id: str, role: Role) -> None:
    if claims.subject != user_id and not can_act(claims.role, role):
        raise PermissionDeniedError()


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(
    body: UserCreate,
    claims: TokenClaims = Depends(require_admin),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    user = service.register(body.name, body.email, body.password, body.role)
    return UserResponse.from_user(user)


@router.get("/users", response_model=list[UserResponse])
def list_users(
    claims: TokenClaims = Depends(require_role(Role.trainer)),
    service: AuthService = Depends(get_auth_service),
) -> list[UserResponse]:
    return [UserResponse.from_user(u) for u in service.list_users()]


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    claims: TokenClaims = Depends(get_current_claims),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    _require_self_or(claims, user_id, Role.trainer)
    return UserResponse.from_user(service.get_user(user_id))


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    body: UserUpdate,
    claims: TokenClaims = Depends(get_current_claims),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Update profile fields. Only an admin may change a role, including their own."""
    _require_self_or(claims, user_id, Role.admin)
    if body.role is not None and not can_act(claims.role, Role.admin):
        raise PermissionDeniedError("Only an admin can change roles.")
    user = service.update_user(user_id, name=body.name, email=body.email, role=body.role)
    return UserResponse.from_user(user)


@router.put("/users/{user_id}/password", response_model=MessageResponse)
def update_password(
    user_id: str,
    body: PasswordUpdate,
    claims: TokenClaims = Depends(get_current_claims),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    _require_self_or(claims, user_id, Role.admin)
    service.update_password(user_id, body.new_password)
    return MessageResponse(message="Password updated.")


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    claims: TokenClaims = Depends(require_admin),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    if user_id == claims.subject:
        raise HTTPException(
            status_code=400,
            detail={"code": "self_deletion", "message": "You cannot delete your own account."},
        )
    service.delete_user(user_id)
    return MessageResponse(message="User deleted.")
