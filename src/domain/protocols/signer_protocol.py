"""Signer protocol (port).

Abstracts key management (local key ring, HSM, KMS). The token service hands
claims to the signer and never touches key material itself.
"""

from typing import Any, Protocol

from src.core.result import Result
from src.domain.errors import TokenVerificationError


class SignerProtocol(Protocol):
    """Signs and verifies compact JWS tokens.

    Raises:
        SignerUnavailableError: Signing backend unreachable.
    """

    @property
    def algorithm(self) -> str:
        """JWS algorithm used for new signatures (e.g. RS256)."""
        ...

    async def sign(self, claims: dict[str, Any]) -> str:
        """Sign claims with the active key; the `kid` header names the key."""
        ...

    async def verify(self, token: str) -> Result[dict[str, Any], TokenVerificationError]:
        """Check format and signature and return the claims.

        Expiry is NOT checked here; the token service compares `exp` against
        the injected clock.

        Returns:
            Success(claims) or Failure with reason MALFORMED or SIGNATURE_INVALID.
        """
        ...

    def jwks(self) -> dict[str, Any]:
        """Public JSON Web Key Set (active and retired verification keys)."""
        ...
