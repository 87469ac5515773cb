"""JWT signer (adapter).

This service implements the SignerProtocol using PyJWT with RSA keys
(RS256 by default) from the `cryptography` package.

Architecture:
    - Implements SignerProtocol (no inheritance required)
    - Structural typing via Protocol
    - Injected via dependency container

Key ring:
    - One active private key, named by `key_id`; every signature carries it
      as the `kid` header
    - Retired keys (kid -> PEM) stay in the ring for verification only, so
      tokens signed before a rotation keep verifying until they expire
    - The public halves of all keys are published at /jwks

Security:
    - Verification selects the key by `kid`; unknown kids fail
    - The `alg` header must equal the configured algorithm ("none" and
      HMAC downgrades are rejected)
    - Expiry is NOT checked here: the token service compares `exp` with the
      injected clock
"""

import json
from typing import Any

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm
from jwt.exceptions import DecodeError, InvalidSignatureError, InvalidTokenError, PyJWTError

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.enums import TokenFailureReason
from src.domain.errors import SignerUnavailableError, TokenVerificationError

_VERIFY_OPTIONS = {
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_aud": False,
    "verify_iss": False,
}


def _load_public_key(pem: str) -> rsa.RSAPublicKey:
    """Load a retired key from PEM (public or private)."""
    data = pem.encode("utf-8")
    if b"PRIVATE KEY" in data:
        private_key = serialization.load_pem_private_key(data, password=None)
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise ValueError("Only RSA keys are supported")
        return private_key.public_key()
    public_key = serialization.load_pem_public_key(data)
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise ValueError("Only RSA keys are supported")
    return public_key


def _invalid(reason: TokenFailureReason, message: str) -> Failure[TokenVerificationError]:
    return Failure(
        error=TokenVerificationError(
            code=ErrorCode.TOKEN_INVALID,
            message=message,
            reason=reason,
        )
    )


class JWTSigner:
    """RSA key ring that signs and verifies compact JWS tokens.

    Usage:
        # Via dependency injection
        from src.core.container import get_signer

        signer = get_signer()
        token = await signer.sign({"sub": "...", "jti": "..."})
        result = await signer.verify(token)
    """

    def __init__(
        self,
        key_id: str,
        private_key_pem: str | None = None,
        previous_keys_pem: dict[str, str] | None = None,
        algorithm: str = "RS256",
    ) -> None:
        """Initialize the key ring.

        Args:
            key_id: kid of the active key.
            private_key_pem: PEM private key. When None an ephemeral 2048-bit
                key is generated (tokens do not survive a restart).
            previous_keys_pem: Retired kid -> PEM, verification only.
            algorithm: RS256, RS384 or RS512.

        Raises:
            ValueError: Unsupported algorithm or non-RSA key.
        """
        if algorithm not in {"RS256", "RS384", "RS512"}:
            msg = f"Unsupported signing algorithm: {algorithm}"
            raise ValueError(msg)

        if private_key_pem is None:
            self._private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        else:
            loaded = serialization.load_pem_private_key(
                private_key_pem.encode("utf-8"), password=None
            )
            if not isinstance(loaded, rsa.RSAPrivateKey):
                msg = "Signing key must be an RSA private key"
                raise ValueError(msg)
            self._private_key = loaded

        self._key_id = key_id
        self._algorithm = algorithm
        self._verification_keys: dict[str, rsa.RSAPublicKey] = {
            kid: _load_public_key(pem) for kid, pem in (previous_keys_pem or {}).items()
        }
        self._verification_keys[key_id] = self._private_key.public_key()

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def key_id(self) -> str:
        return self._key_id

    async def sign(self, claims: dict[str, Any]) -> str:
        """Sign claims with the active key.

        Returns:
            Compact JWS (header.payload.signature) with `kid` header.

        Raises:
            SignerUnavailableError: The key backend could not produce a signature.
        """
        try:
            token: str = jwt.encode(
                claims,
                self._private_key,
                algorithm=self._algorithm,
                headers={"kid": self._key_id},
            )
        except (PyJWTError, ValueError) as exc:
            msg = f"Signing with key {self._key_id} failed"
            raise SignerUnavailableError(msg) from exc
        return token

    async def verify(self, token: str) -> Result[dict[str, Any], TokenVerificationError]:
        """Check format, `kid`, `alg` and signature; return the claims."""
        try:
            header = jwt.get_unverified_header(token)
        except DecodeError:
            return _invalid(TokenFailureReason.MALFORMED, "Token is not a valid JWS")

        kid = header.get("kid")
        key = self._verification_keys.get(kid) if isinstance(kid, str) else None
        if key is None:
            return _invalid(TokenFailureReason.SIGNATURE_INVALID, "Unknown signing key")
        if header.get("alg") != self._algorithm:
            return _invalid(TokenFailureReason.SIGNATURE_INVALID, "Unexpected signing algorithm")

        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                key,
                algorithms=[self._algorithm],
                options=_VERIFY_OPTIONS,
            )
        except InvalidSignatureError:
            return _invalid(TokenFailureReason.SIGNATURE_INVALID, "Signature does not verify")
        except InvalidTokenError:
            return _invalid(TokenFailureReason.MALFORMED, "Token claims are malformed")
        return Success(value=claims)

    def jwks(self) -> dict[str, Any]:
        """Public JSON Web Key Set, active key first."""
        keys = []
        for kid in sorted(self._verification_keys, key=lambda k: k != self._key_id):
            jwk = json.loads(RSAAlgorithm.to_jwk(self._verification_keys[kid]))
            jwk.update({"kid": kid, "use": "sig", "alg": self._algorithm})
            keys.append(jwk)
        return {"keys": keys}
