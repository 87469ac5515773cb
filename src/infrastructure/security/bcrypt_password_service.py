"""Bcrypt hashing adapter (PasswordHashingProtocol).

Hashes user passwords and confidential client secrets. The cost factor comes
from Settings.bcrypt_rounds (12 in production, 4 in the test suite); each +1
doubles the work.

Unknown-account logins call `dummy_verify`, which costs one full bcrypt
check, so both failure branches take the same time.
"""

import secrets

import bcrypt

_MIN_ROUNDS = 4
_MAX_ROUNDS = 31


class BcryptPasswordService:
    """Bcrypt hashing for passwords and client secrets.

    Usage:
        from src.core.container import get_password_service

        hasher = get_password_service()
        stored = hasher.hash_password("SecurePass123!")
        hasher.verify_password("SecurePass123!", stored)  # True
    """

    def __init__(self, cost_factor: int = 12) -> None:
        """Initialize with a cost factor.

        Args:
            cost_factor: log2 of the bcrypt work factor (4-31).

        Raises:
            ValueError: Cost factor outside bcrypt's range.
        """
        if not _MIN_ROUNDS <= cost_factor <= _MAX_ROUNDS:
            msg = f"Cost factor must be between {_MIN_ROUNDS} and {_MAX_ROUNDS}"
            raise ValueError(msg)

        self._cost_factor = cost_factor
        self._dummy_hash = self.hash_password(secrets.token_urlsafe(16))

    def hash_password(self, password: str) -> str:
        """Hash a plaintext secret with a fresh salt.

        Returns:
            60-character `$2b$<cost>$...` string. Two calls with the same
            input never return the same hash.
        """
        salt = bcrypt.gensalt(rounds=self._cost_factor)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Check a plaintext secret against a stored hash.

        Returns:
            True on match. A malformed hash yields False rather than an error.
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, AttributeError):
            return False

    def dummy_verify(self, password: str) -> None:
        """Spend one verification against a throwaway hash; the result is discarded."""
        self.verify_password(password, self._dummy_hash)
