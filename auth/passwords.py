"""
auth/passwords.py -- bcrypt password hashing.

bcrypt is used directly rather than through passlib: passlib's wrap-bug
detection feeds bcrypt a password longer than 72 bytes, which bcrypt 4.x+
rejects. Direct usage is simpler and has no compatibility shim.

The cost factor comes from Settings.bcrypt_rounds and is fixed for the
lifetime of the hasher. Callers cannot pass a cost, so no request can
downgrade the work factor.

bcrypt only looks at the first 72 bytes of input. Longer passwords are
rejected with ValidationError rather than truncated, so two passwords that
share a 72-byte prefix can never verify against each other.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging

import bcrypt

from auth.errors import InternalError, ValidationError

logger = logging.getLogger("trainingportal.auth")

MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted, adaptive-cost one-way hashing of user passwords.

    Usage:
        hasher = PasswordHasher(rounds=12)
        digest = hasher.hash("secret1")
        hasher.verify("secret1", digest)  # True
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds
        # Timing equalization dummy hash [C1]. Computed once so the first
        # unknown-email login is not measurably faster than later ones.
        self._dummy_hash = self.hash("trainingportal_timing_dummy")

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, plaintext: str) -> str:
        """Return a bcrypt digest of the plaintext password.

        Raises ValidationError for an empty or over-long password and
        InternalError if bcrypt itself fails (e.g. invalid cost). There is no
        fallback to a weaker scheme.
        """
        encoded = _encode(plaintext)
        try:
            salt = bcrypt.gensalt(rounds=self._rounds)
            return bcrypt.hashpw(encoded, salt).decode("utf-8")
        except (ValueError, TypeError) as exc:
            logger.error("Password hashing failed (rounds=%d): %s", self._rounds, type(exc).__name__)
            raise InternalError("password hashing failed") from exc

    def verify(self, plaintext: str, digest: str) -> bool:
        """Return True if the plaintext matches the digest.

        Malformed digests and unacceptable plaintexts return False rather than
        raising -- the caller treats every mismatch the same way.
        """
        if not plaintext or not digest:
            return False
        encoded = plaintext.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, digest.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, plaintext: str) -> None:
        """Burn one bcrypt comparison against the dummy hash.

        Called when a login names an unknown account so the response takes as
        long as a wrong-password response and does not reveal which emails exist.
        """
        self.verify(plaintext or "x", self._dummy_hash)


def _encode(plaintext: str) -> bytes:
    if not plaintext:
        raise ValidationError("password is required")
    encoded = plaintext.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return encoded
