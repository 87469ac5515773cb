"""Common error classes used across all domains and layers.

Error Types:
- ValidationError: Malformed or missing input (OAuth2 ``invalid_request``)
- NotFoundError: Unknown aggregate; reported externally as an auth failure
- ConflictError: Optimistic-concurrency collision or uniqueness violation
- AuthenticationError: Bad credentials or failed proof (uniform message)
- AuthorizationError: Authenticated but not permitted
- ExpiredError: Code or token past its validity window
- RevokedError: Code, token or session already revoked

Usage:
    from src.core.errors import ValidationError
    from src.core.enums import ErrorCode
    from src.core.result import Failure

    return Failure(error=ValidationError(
        code=ErrorCode.INVALID_REDIRECT_URI,
        message="redirect_uri is not registered for this client",
        field="redirect_uri",
    ))
"""

from dataclasses import dataclass

from src.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationError(DomainError):
    """Input validation failure.

    Attributes:
        field: Field name that failed validation.
    """

    field: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class NotFoundError(DomainError):
    """Aggregate or lookup key not found.

    Attributes:
        resource_type: Type of resource (User, Client, Session, ...).
        resource_id: ID of the resource that was not found.
    """

    resource_type: str
    resource_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictError(DomainError):
    """Resource conflict (stale expected version, duplicate key).

    Attributes:
        resource_type: Type of resource in conflict.
        conflicting_field: Field that has conflict (email, version, ...).
        expected_version: Version the caller expected (concurrency conflicts).
        actual_version: Version currently stored (concurrency conflicts).
    """

    resource_type: str
    conflicting_field: str | None = None
    expected_version: int | None = None
    actual_version: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AuthenticationError(DomainError):
    """Authentication failure (invalid credentials, failed proof).

    Messages must stay uniform so callers cannot tell whether an
    account or client exists.
    """

    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class AuthorizationError(DomainError):
    """Authorization failure (no permission).

    Attributes:
        required_permission: Permission that was required.
    """

    required_permission: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ExpiredError(DomainError):
    """Authorization code or token used after its expiry."""

    pass


@dataclass(frozen=True, slots=True, kw_only=True)
class RevokedError(DomainError):
    """Authorization code, token or session already revoked or consumed."""

    pass
