"""Core shared kernel.

This module provides foundational utilities used across all architectural layers:
- Result types for railway-oriented programming
- Base error classes for domain-level error handling
- Application settings

The core module has NO dependencies on other application layers.
"""

from src.core.enums import ErrorCode
from src.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    ExpiredError,
    NotFoundError,
    RevokedError,
    ValidationError,
)
from src.core.result import Failure, Result, Success

__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DomainError",
    "ErrorCode",
    "ExpiredError",
    "Failure",
    "NotFoundError",
    "Result",
    "RevokedError",
    "Success",
    "ValidationError",
]
