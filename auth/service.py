"""
auth/service.py -- Registration, login and account maintenance.

AuthService is the single entry point the HTTP layer uses. It owns the
register and login workflows and delegates to three injected collaborators:

    store   -- CredentialStore (durable User records)
    hasher  -- PasswordHasher (bcrypt, fixed cost)
    issuer  -- TokenIssuer (HS256 JWT, fixed validity window)

The service holds no mutable state of its own and needs no locking. Every
failure is a typed AuthError; store failures propagate unchanged and are
never papered over with default data.

Redaction: the User returned by register()/get_user() still carries
password_hash. Stripping it is the response layer's job (api/models.py has
no field for it).

Logging: user ids and emails only. Never passwords, hashes, tokens or the
signing secret.

Layer rule: may import core/ (config) but not api/.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import TYPE_CHECKING

from auth.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from auth.models import LoginResult, TokenClaims, User
from auth.passwords import PasswordHasher
from auth.roles import ASSIGNABLE_ROLES, Role
from auth.tokens import TokenIssuer

if TYPE_CHECKING:
    from auth.store import CredentialStore
    from core.config import Settings

logger = logging.getLogger("trainingportal.auth")

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")

_BEARER_PREFIX = "bearer "


def is_valid_email(email: str) -> bool:
    """Structural check: local-part @ domain with a dot and a 2+ letter suffix."""
    return bool(_EMAIL_RE.fullmatch(email))


class AuthService:
    def __init__(self, store: CredentialStore, hasher: PasswordHasher, issuer: TokenIssuer) -> None:
        self._store = store
        self._hasher = hasher
        self._issuer = issuer

    @classmethod
    def from_settings(cls, store: CredentialStore, settings: Settings) -> AuthService:
        """Build a service with the hasher and issuer configured from Settings."""
        return cls(
            store=store,
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            issuer=TokenIssuer(
                secret_key=settings.secret_key,
                expire_seconds=settings.token_expire_seconds,
            ),
        )

    @property
    def token_expire_seconds(self) -> int:
        return self._issuer.expire_seconds

    # ------------------------------------------------------------------
    # Registration and login
    # ------------------------------------------------------------------

    def register(self, name: str, email: str, password: str, role: Role | str = Role.employee) -> User:
        """Create a new account.

        Order matters: shape checks first, then the duplicate lookup, then the
        (slow) hash, then the insert. A duplicate email is a ConflictError no
        matter what password was supplied.
        """
        if not name or not email or not password:
            raise ValidationError("name, email, and password are required")
        if not is_valid_email(email):
            raise ValidationError("invalid email format")
        parsed_role = _assignable_role(role)

        if self._store.find_by_email(email) is not None:
            raise ConflictError("email already registered")

        password_hash = self._hasher.hash(password)
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=password_hash,
            role=parsed_role,
        )
        self._store.create(user)
        logger.info("Registered user %s (role=%s)", user.id, user.role.value)
        return user

    def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and issue a bearer token.

        Unknown email and wrong password raise the same AuthenticationError,
        and both paths run exactly one bcrypt comparison [C1].
        """
        user = self._store.find_by_email(email) if email else None
        if user is None:
            self._hasher.verify_dummy(password)
            logger.info("Login failed: unknown account")
            raise AuthenticationError("invalid credentials")
        if not self._hasher.verify(password, user.password_hash):
            logger.info("Login failed for user %s", user.id)
            raise AuthenticationError("invalid credentials")

        token = self._issuer.issue(user.id, user.role)
        return LoginResult(subject=user.id, role=user.role, token=token)

    def verify_token(self, bearer: str | None) -> TokenClaims:
        """Resolve a bearer token (with or without the "Bearer " prefix) to its claims.

        Every failure raises the same AuthenticationError("invalid token").
        No side effects: calling it twice on one token gives the same result.
        """
        token = (bearer or "").strip()
        if token.lower().startswith(_BEARER_PREFIX):
            token = token[len(_BEARER_PREFIX) :].strip()
        claims = self._issuer.verify(token)
        if claims is None:
            raise AuthenticationError("invalid token")
        return claims

    # ------------------------------------------------------------------
    # Account maintenance
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> User:
        if not user_id:
            raise ValidationError("id is required")
        user = self._store.find_by_id(user_id)
        if user is None:
            raise NotFoundError("user not found")
        return user

    def get_user_by_email(self, email: str) -> User:
        if not email:
            raise ValidationError("email is required")
        user = self._store.find_by_email(email)
        if user is None:
            raise NotFoundError("user not found")
        return user

    def list_users(self) -> list[User]:
        return self._store.list_users()

    def update_user(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        role: Role | str | None = None,
    ) -> User:
        """Change name, email and/or role. The password hash is left as is.

        Fields passed as None (or empty strings) keep their current value.
        """
        user = self.get_user(user_id)

        if email and email != user.email:
            if not is_valid_email(email):
                raise ValidationError("invalid email format")
            existing = self._store.find_by_email(email)
            if existing is not None and existing.id != user.id:
                raise ConflictError("email already registered")
            user.email = email
        if name:
            user.name = name
        if role:
            user.role = _assignable_role(role)

        self._store.update(user)
        logger.info("Updated user %s", user.id)
        return user

    def update_password(self, user_id: str, new_password: str) -> None:
        """Replace the stored hash.

        Tokens issued before the change remain valid until they expire;
        there is no revocation list.
        """
        if not user_id or not new_password:
            raise ValidationError("id and new password are required")
        user = self._store.find_by_id(user_id)
        if user is None:
            raise NotFoundError("user not found")
        user.password_hash = self._hasher.hash(new_password)
        self._store.update(user)
        logger.info("Password changed for user %s", user.id)

    def delete_user(self, user_id: str) -> None:
        if not user_id:
            raise ValidationError("id is required")
        self._store.delete(user_id)
        logger.info("Deleted user %s", user_id)


def _assignable_role(role: Role | str) -> Role:
    parsed = Role.parse(role)
    if parsed not in ASSIGNABLE_ROLES:
        raise ValidationError("invalid role")
    return parsed
