"""
API request and response models for the training portal REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Redaction: UserResponse has no password field. Converting a domain User to a
response can therefore never leak its hash.

Shape validation here is deliberately light (types and upper bounds). Empty
fields and malformed emails reach AuthService, which owns those rules and
answers with a 400 validation_error.
"""

from typing import Optional

from pydantic import BaseModel, Field

from auth.models import User
from auth.roles import Role

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Body for POST /api/v1/auth/register. Self-registered accounts are employees."""

    name: str = Field(max_length=255)
    email: str = Field(max_length=255)
    password: str = Field(max_length=255)


class UserCreate(RegisterRequest):
    """Body for POST /api/v1/users (admin only) -- any assignable role."""

    role: Role = Role.employee


class LoginRequest(BaseModel):
    email: str = Field(max_length=255)
    password: str = Field(max_length=255)


class UserUpdate(BaseModel):
    """Body for PUT /api/v1/users/{id}. Omitted fields are left unchanged."""

    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    role: Optional[Role] = None


class PasswordUpdate(BaseModel):
    new_password: str = Field(max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Outward-facing view of a user. Never carries the password hash."""

    id: str
    name: str
    email: str
    role: Role
    created_at: str = ""

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            created_at=user.created_at or "",
        )


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: str
    role: Role


class MeResponse(BaseModel):
    user_id: str
    role: Role
    expires_at: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class ErrorDetail(BaseModel):
    """Structured error body returned inside ErrorResponse."""

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Envelope for every non-2xx response."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str] = {}
