"""PKCE (RFC 7636) challenge computation and verification."""

import base64
import hashlib
import hmac

from src.domain.enums import CodeChallengeMethod


def compute_s256_challenge(verifier: str) -> str:
    """base64url(SHA-256(verifier)) without padding.

    Example:
        >>> compute_s256_challenge("dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk")
        'E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM'
    """
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def verify_code_verifier(
    verifier: str,
    challenge: str,
    method: CodeChallengeMethod,
) -> bool:
    """Check a verifier against the stored challenge in constant time."""
    try:
        candidate = (
            compute_s256_challenge(verifier)
            if method is CodeChallengeMethod.S256
            else verifier
        )
    except UnicodeEncodeError:
        return False
    return hmac.compare_digest(candidate.encode(), challenge.encode())
