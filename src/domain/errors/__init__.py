"""Domain errors package.

Exports domain-level error classes for convenient importing.

Usage:
    from src.domain.errors import TokenVerificationError, UnknownEventTypeError
"""

from src.domain.errors.rehydration_error import RehydrationError, UnknownEventTypeError
from src.domain.errors.token_error import TokenVerificationError
from src.domain.errors.unavailable_error import (
    CollaboratorUnavailableError,
    EventStoreUnavailableError,
    IdentityVerifierUnavailableError,
    IndexStoreUnavailableError,
    SignerUnavailableError,
)

__all__ = [
    "CollaboratorUnavailableError",
    "EventStoreUnavailableError",
    "IdentityVerifierUnavailableError",
    "IndexStoreUnavailableError",
    "RehydrationError",
    "SignerUnavailableError",
    "TokenVerificationError",
    "UnknownEventTypeError",
]
