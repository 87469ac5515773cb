"""Identity commands (CQRS write operations).

Commands represent user intent to change system state.
All commands are immutable (frozen=True) and use keyword-only arguments (kw_only=True).

Pattern:
- Commands are data containers (no logic)
- Handlers execute business logic
- Handlers return Result types
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class RegisterUser:
    """Register a new user account.

    Attributes:
        email: Email address (validated and normalised by the handler).
        password: Plain password (checked against the password policy, then
            hashed; never stored or logged).

    Example:
        >>> command = RegisterUser(email="user@example.com", password="SecurePass123!")
        >>> result = await handler.handle(command)
    """

    email: str
    password: str


@dataclass(frozen=True, kw_only=True)
class AuthenticateUser:
    """Check email/password credentials.

    Single responsibility: records the outcome on the identity stream.
    Does NOT create sessions or issue tokens.

    Attributes:
        email: Email address as entered.
        password: Plain password.
        ip_address: Client IP, for audit.
        user_agent: Client User-Agent, for audit.
    """

    email: str
    password: str
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, kw_only=True)
class ChangePassword:
    """Replace the password after re-authenticating with the current one.

    Attributes:
        user_id: User changing the password.
        old_password: Current password.
        new_password: New password (policy-checked).
        current_session_id: Session performing the change; every other
            session of the user is revoked.
    """

    user_id: UUID
    old_password: str
    new_password: str
    current_session_id: UUID | None = None


@dataclass(frozen=True, kw_only=True)
class LinkIdentity:
    """Bind an external provider account to the user.

    Attributes:
        user_id: User to link.
        provider: Provider name (as configured).
        assertion: Provider-signed proof naming the external account.
    """

    user_id: UUID
    provider: str
    assertion: str


@dataclass(frozen=True, kw_only=True)
class AssignRole:
    """Grant a role (idempotent)."""

    user_id: UUID
    role: str


@dataclass(frozen=True, kw_only=True)
class RevokeRole:
    """Withdraw a role (idempotent)."""

    user_id: UUID
    role: str


@dataclass(frozen=True, kw_only=True)
class DeactivateUser:
    """Deactivate a user: frees the email and revokes every session."""

    user_id: UUID
    reason: str = "deactivated"
