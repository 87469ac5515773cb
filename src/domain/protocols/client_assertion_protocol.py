"""Client assertion verifier protocol (port).

Checks `private_key_jwt` client assertions at the token, introspection and
revocation endpoints.
"""

from typing import Protocol

from src.core.errors import AuthenticationError
from src.core.result import Result


class ClientAssertionVerifierProtocol(Protocol):
    """Verifies a signed client assertion against the client's registered key."""

    async def verify(
        self, assertion: str, *, client_id: str, public_key_pem: str
    ) -> Result[None, AuthenticationError]:
        """Verify signature, issuer, subject, audience and expiry.

        Returns:
            Success(None) or Failure(AuthenticationError) with code
            CLIENT_AUTHENTICATION_FAILED.
        """
        ...
