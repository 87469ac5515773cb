"""Security infrastructure adapters.

This package contains security-related infrastructure implementations:
- Password and client secret hashing (bcrypt)
- JWT signing and verification with an RSA key ring (PyJWT + cryptography)
- Opaque code, session handle and client secret generation
- External identity assertion verification (shared-secret HS256)
- private_key_jwt client assertion verification
"""

from src.infrastructure.security.bcrypt_password_service import BcryptPasswordService
from src.infrastructure.security.client_assertion_verifier import JWTClientAssertionVerifier
from src.infrastructure.security.external_assertion_verifier import (
    SharedSecretAssertionVerifier,
)
from src.infrastructure.security.jwt_signer import JWTSigner
from src.infrastructure.security.opaque_token_service import OpaqueTokenService, sha256_hex

__all__ = [
    "BcryptPasswordService",
    "JWTClientAssertionVerifier",
    "JWTSigner",
    "OpaqueTokenService",
    "SharedSecretAssertionVerifier",
    "sha256_hex",
]
