"""Shared-secret external identity verifier (adapter).

Implements ExternalIdentityVerifierProtocol for providers that hand the user
an HS256-signed assertion (a JWT) naming the account at the provider.

Assertion requirements:
    - Signed with the provider's shared secret (Settings.external_identity_providers)
    - `sub`: the external account id
    - `exp`: required and in the future
    - `aud`: this service's issuer

Real federation adapters (Google, SAML, ...) would implement the same
protocol.
"""

import jwt
from jwt.exceptions import InvalidTokenError

from src.core.enums import ErrorCode
from src.core.errors import AuthenticationError
from src.core.result import Failure, Result, Success


def _rejected(message: str) -> Failure[AuthenticationError]:
    return Failure(
        error=AuthenticationError(code=ErrorCode.EXTERNAL_ASSERTION_INVALID, message=message)
    )


class SharedSecretAssertionVerifier:
    """Verifies HS256 provider assertions.

    Attributes:
        _secrets: Provider name -> shared secret.
        _audience: Expected `aud` (the issuer).
    """

    def __init__(self, provider_secrets: dict[str, str], audience: str) -> None:
        self._secrets = dict(provider_secrets)
        self._audience = audience

    async def verify(self, provider: str, assertion: str) -> Result[str, AuthenticationError]:
        """Verify an assertion and return the external account id."""
        secret = self._secrets.get(provider)
        if secret is None:
            return _rejected(f"Unknown identity provider: {provider}")
        try:
            claims = jwt.decode(
                assertion,
                secret,
                algorithms=["HS256"],
                audience=self._audience,
                options={"require": ["sub", "exp", "aud"]},
            )
        except InvalidTokenError:
            return _rejected("Identity assertion is invalid or expired")

        external_id = claims.get("sub")
        if not isinstance(external_id, str) or not external_id:
            return _rejected("Identity assertion has no subject")
        return Success(value=external_id)
