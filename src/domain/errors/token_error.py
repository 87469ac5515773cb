"""Token verification error.

Part of the TokenService contract: every verification failure carries one of
four typed reasons so callers (introspection, bearer authentication) can react
without parsing messages.

Usage:
    from src.domain.errors import TokenVerificationError

    match await token_service.verify(raw):
        case Failure(error=TokenVerificationError(reason=TokenFailureReason.EXPIRED)):
            ...
"""

from dataclasses import dataclass

from src.core.errors import DomainError
from src.domain.enums import TokenFailureReason


@dataclass(frozen=True, slots=True, kw_only=True)
class TokenVerificationError(DomainError):
    """A presented token did not verify.

    Attributes:
        code: ErrorCode (TOKEN_INVALID, TOKEN_EXPIRED, TOKEN_REVOKED).
        message: Human-readable message (never shown to OAuth callers).
        reason: Typed failure reason.
    """

    reason: TokenFailureReason
