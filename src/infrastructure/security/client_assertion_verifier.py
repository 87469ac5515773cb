"""private_key_jwt client assertion verifier (adapter).

Implements ClientAssertionVerifierProtocol (RFC 7523 section 3): a
confidential client authenticates at the token, introspection and revocation
endpoints with a JWT signed by the private half of the key it registered.

Checks:
    - RS256 signature with the client's registered public key
    - `iss` == `sub` == client_id
    - `aud` == the token endpoint URL
    - `exp` present and in the future
"""

import jwt
from jwt.exceptions import InvalidTokenError

from src.core.enums import ErrorCode
from src.core.errors import AuthenticationError
from src.core.result import Failure, Result, Success


class JWTClientAssertionVerifier:
    """Verifies client assertions against a registered PEM public key."""

    def __init__(self, audience: str) -> None:
        """Initialize verifier.

        Args:
            audience: Expected `aud` (absolute token endpoint URL).
        """
        self._audience = audience

    async def verify(
        self, assertion: str, *, client_id: str, public_key_pem: str
    ) -> Result[None, AuthenticationError]:
        try:
            claims = jwt.decode(
                assertion,
                public_key_pem,
                algorithms=["RS256"],
                audience=self._audience,
                options={"require": ["iss", "sub", "aud", "exp"]},
            )
        except (InvalidTokenError, ValueError):
            return Failure(error=_failed())
        if claims.get("iss") != client_id or claims.get("sub") != client_id:
            return Failure(error=_failed())
        return Success(value=None)


def _failed() -> AuthenticationError:
    return AuthenticationError(
        code=ErrorCode.CLIENT_AUTHENTICATION_FAILED,
        message="Client authentication failed",
    )
