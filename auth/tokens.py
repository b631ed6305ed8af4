"""
auth/tokens.py -- JWT bearer token issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       sub (user id), role, exp and iat. Verification returns None on any
       failure -- malformed, bad signature, expired, wrong algorithm, missing
       or unknown claims all look identical to the caller. The service turns
       None into a single AuthenticationError("invalid token").

  Algorithm pinning: decode() is called with algorithms=["HS256"] only, so a
       token whose header claims "none" or an asymmetric algorithm is rejected.

  No revocation: tokens are never stored server-side and there is no
       blocklist. A token stays valid until exp even if the account's
       password or role changes afterwards.

  Secret: injected at construction (from core.config.Settings). An empty
       secret raises InternalError -- the issuer refuses to exist rather than
       sign with a blank key.

Verification is a pure function of (token, secret, time): exp is compared
against the now argument, or the current UTC time when none is given. No I/O,
no state, safe to call any number of times.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.errors import InternalError
from auth.models import TokenClaims
from auth.roles import Role

logger = logging.getLogger("trainingportal.auth")

ALGORITHM = "HS256"


class TokenIssuer:
    """Creates and validates signed, time-limited bearer tokens.

    Usage:
        issuer = TokenIssuer(secret_key=settings.secret_key, expire_seconds=72 * 3600)
        token = issuer.issue("a1b2...", Role.employee)
        claims = issuer.verify(token)  # TokenClaims or None
    """

    def __init__(self, secret_key: str, expire_seconds: int, algorithm: str = ALGORITHM) -> None:
        if not secret_key:
            raise InternalError("token signing secret is not configured")
        if expire_seconds <= 0:
            raise InternalError("token validity window must be positive")
        self._secret_key = secret_key
        self._expire_seconds = expire_seconds
        self._algorithm = algorithm

    @property
    def expire_seconds(self) -> int:
        return self._expire_seconds

    def issue(self, subject: str, role: Role | str, now: datetime | None = None) -> str:
        """Encode a signed JWT for the given user id and role.

        Args:
            subject: User.id stored as the sub claim.
            role:    The user's current role.
            now:     Issue time; defaults to the current UTC time. Tests pass
                     a fixed value to produce already-expired tokens.
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "role": Role(role).value,
            "exp": issued_at + timedelta(seconds=self._expire_seconds),
            "iat": issued_at,
        }
        try:
            return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
        except JWTError as exc:
            logger.error("Token signing failed: %s", type(exc).__name__)
            raise InternalError("failed to sign token") from exc

    def verify(self, token: str, now: datetime | None = None) -> TokenClaims | None:
        """Decode and verify a JWT. Returns TokenClaims or None on any failure.

        Expiry is checked against now (default: current UTC time) rather than
        left to jose, so the result depends only on the token, the secret and
        the time passed in.
        """
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            return None

        subject = payload.get("sub")
        role = Role.parse(payload.get("role"))
        exp = payload.get("exp")
        if not isinstance(subject, str) or not subject or role is None:
            return None
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return None
        try:
            expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            return None
        if expires_at <= (now or datetime.now(timezone.utc)):
            return None
        return TokenClaims(subject=subject, role=role, expires_at=expires_at)
