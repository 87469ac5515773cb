"""Base domain error class for Railway-Oriented Programming.

DomainError is the base class for every business failure in the service.
It flows through the system as data inside ``Failure``, never raised.

Architecture:
- Base class for all error types (core, domain, application)
- Does NOT inherit from Exception (not raised, returned in Result)
- Carries an ErrorCode so the presentation layer can map it to an
  OAuth2 error deterministically

Usage:
    from src.core.errors import DomainError
    from src.core.enums import ErrorCode

    @dataclass(frozen=True, slots=True, kw_only=True)
    class MyError(DomainError):
        pass  # Inherits code, message, details
"""

from dataclasses import dataclass

from src.core.enums import ErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainError:
    """Base domain error (does NOT inherit from Exception).

    Attributes:
        code: Machine-readable error code (enum).
        message: Human-readable error message. Safe to show to clients.
        details: Optional context for logs (never returned to clients).
    """

    code: ErrorCode
    message: str
    details: dict[str, str] | None = None

    def __str__(self) -> str:
        """String representation of error."""
        return f"{self.code.value}: {self.message}"
