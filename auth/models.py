"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Dataclasses own the
domain shape; the store, the service and the routes do the work.

password_hash lives on User because the service needs it to verify logins.
It is never part of an outward-facing response: the api/ response models
have no field for it, so redaction happens at the response boundary.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from auth.roles import Role


@dataclass
class User:
    """An identity record in the credential store.

    id is a UUID4 string assigned by AuthService.register() and never changes.
    email is unique and matched exactly (case-sensitive).
    """

    id: str
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """The validated claim set carried by a bearer token."""

    subject: str  # User.id
    role: Role
    expires_at: datetime


@dataclass(frozen=True)
class LoginResult:
    subject: str
    role: Role
    token: str
