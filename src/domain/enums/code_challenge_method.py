"""PKCE code challenge methods (RFC 7636)."""

from enum import Enum


class CodeChallengeMethod(str, Enum):
    """How a PKCE code verifier is transformed into the challenge.

    S256: base64url(SHA-256(verifier)) without padding.
    PLAIN: challenge equals the verifier.
    """

    S256 = "S256"
    PLAIN = "plain"
