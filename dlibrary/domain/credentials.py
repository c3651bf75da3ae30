"""
Credential store - bcrypt password hashing and verification.

bcrypt.checkpw() is constant-time for a given cost factor, so callers that
have no stored hash (unknown email) should still call verify_dummy() to keep
the response time of "no such account" equal to "wrong password".
"""

import bcrypt

# bcrypt only reads the first 72 bytes; newer releases reject longer input.
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode()[:_BCRYPT_MAX_BYTES]


class CredentialStore:
    """Hashes and verifies passwords with a fixed bcrypt work factor."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds
        self._dummy_hash = bcrypt.hashpw(
            b"dummy_password_for_timing_safety", bcrypt.gensalt(rounds)
        ).decode()

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        """Hash password using bcrypt with the configured cost factor."""
        return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=self._rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Check password against a stored hash; malformed hashes never match."""
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode())
        except ValueError:
            return False

    def verify_dummy(self, password: str) -> bool:
        """Spend the same bcrypt time as verify() without a real hash. Always False."""
        bcrypt.checkpw(_encode(password), self._dummy_hash.encode())
        return False
