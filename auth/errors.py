"""
auth/errors.py -- Typed error taxonomy for the auth core.

Every error carries a stable machine-readable code and the HTTP status an
outer layer should map it to. The auth core never imports fastapi; api/main.py
registers one exception handler that turns any AuthError into the standard
{"error": {"code", "message"}} envelope.

Messages are short and generic on purpose. AuthenticationError in particular
must read the same whether the email was unknown, the password was wrong, or
the token was expired/forged -- callers must not be able to tell which.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for all errors raised by the auth core."""

    code = "error"
    status_code = 500
    default_message = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Input has the wrong shape (missing field, malformed email, unknown role)."""

    code = "validation_error"
    status_code = 400
    default_message = "Invalid input."


class AuthenticationError(AuthError):
    """Bad credentials or an invalid/expired token. Never states which."""

    code = "unauthorized"
    status_code = 401
    default_message = "invalid credentials"


class PermissionDeniedError(AuthError):
    """Authenticated, but the actor's role does not reach the required role."""

    code = "forbidden"
    status_code = 403
    default_message = "Insufficient permissions."


class NotFoundError(AuthError):
    code = "not_found"
    status_code = 404
    default_message = "user not found"


class ConflictError(AuthError):
    code = "conflict"
    status_code = 409
    default_message = "email already registered"


class InternalError(AuthError):
    """Hashing, signing, or storage failure. Details go to the log, not the client."""

    code = "internal_error"
    status_code = 500
    default_message = "An unexpected error occurred."


class StoreError(InternalError):
    """The credential store failed (connection, SQL, driver). Never retried here."""

    default_message = "Credential store failure."
