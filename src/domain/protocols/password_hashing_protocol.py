"""Password hashing protocol for domain layer.

Used for both user passwords and client secrets.

Architecture:
    - Domain defines protocol (port)
    - Infrastructure implements adapter (BcryptPasswordService)
"""

from typing import Protocol


class PasswordHashingProtocol(Protocol):
    """Password hashing and verification interface.

    Implementations:
        - BcryptPasswordService: bcrypt with configurable cost factor
    """

    def hash_password(self, password: str) -> str:
        """Hash a plaintext secret (random salt per call)."""
        ...

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a plaintext secret against a hash.

        Returns:
            True if it matches. False for a mismatch or an invalid hash
            format (no exceptions). The comparison is constant-time.
        """
        ...

    def dummy_verify(self, password: str) -> None:
        """Spend the same time as a real verification against a fixed hash.

        Used when the account does not exist so response timing does not
        reveal whether an email is registered.
        """
        ...
