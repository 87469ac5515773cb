"""Typed reasons a token fails verification."""

from enum import Enum


class TokenFailureReason(str, Enum):
    """Why a presented token did not verify.

    Checked in order: SIGNATURE_INVALID / MALFORMED, EXPIRED, REVOKED.
    """

    EXPIRED = "expired"
    MALFORMED = "malformed"
    REVOKED = "revoked"
    SIGNATURE_INVALID = "signature_invalid"
