"""Opaque token service.

This service generates the opaque, high-entropy values the service hands out:
authorization codes, browser session handles, client ids and client secrets.

Architecture:
    - Implements SecretGeneratorProtocol (structural typing)
    - Injected into application handlers via the container

Token Strategy:
    - 32-byte random values (urlsafe base64, ~43 characters)
    - Codes and session handles are looked up by SHA-256 digest; only the
      digest is ever stored (event payloads, index keys)
    - Client secrets are bcrypt-hashed by the password service instead,
      because they are verified, never looked up
"""

import hashlib
import hmac
import secrets

TOKEN_BYTES = 32


def sha256_hex(value: str) -> str:
    """Hex SHA-256 digest used as lookup key for codes and handles."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


class OpaqueTokenService:
    """Opaque token generation.

    Usage:
        service = OpaqueTokenService()

        code, code_hash = service.generate_code()
        # Store code_hash in the AuthorizationCodeIssued event, send code
        # to the client
    """

    def generate_code(self) -> tuple[str, str]:
        """Generate an authorization code and its digest.

        Returns:
            Tuple of (code, code_hash):
                - code: Plain code for the redirect (urlsafe base64)
                - code_hash: SHA-256 hex digest to store

        Note:
            - 32 bytes = 256 bits of entropy
            - Each generation produces a unique code
        """
        code = secrets.token_urlsafe(TOKEN_BYTES)
        return code, sha256_hex(code)

    def generate_session_handle(self) -> tuple[str, str]:
        """Generate a browser session handle (cookie value) and its digest."""
        handle = secrets.token_urlsafe(TOKEN_BYTES)
        return handle, sha256_hex(handle)

    def generate_client_id(self) -> str:
        """Generate a public client identifier."""
        return secrets.token_urlsafe(16)

    def generate_client_secret(self) -> str:
        """Generate a client secret (returned once, then only its hash is kept)."""
        return secrets.token_urlsafe(TOKEN_BYTES)

    def digest(self, value: str) -> str:
        """SHA-256 lookup digest of a presented code or handle."""
        return sha256_hex(value)

    def matches(self, value: str, digest: str) -> bool:
        """Constant-time check of a presented value against a stored digest."""
        return hmac.compare_digest(sha256_hex(value), digest)
