"""External identity verifier protocol (port).

Federation (OIDC providers, SAML) lives outside the core. The core only asks
"does this assertion prove an account at `provider`, and which one?".
"""

from typing import Protocol

from src.core.errors import AuthenticationError
from src.core.result import Result


class ExternalIdentityVerifierProtocol(Protocol):
    """Verifies provider assertions.

    Raises:
        IdentityVerifierUnavailableError: Provider unreachable.
    """

    async def verify(self, provider: str, assertion: str) -> Result[str, AuthenticationError]:
        """Verify an assertion.

        Returns:
            Success(external_id) or Failure(AuthenticationError) when the
            assertion is invalid, expired or names an unknown provider.
        """
        ...
