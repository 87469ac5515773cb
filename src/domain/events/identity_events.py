"""Identity aggregate events.

The Identity (user) aggregate is the left-fold of these events. Together they
form the closed `IdentityEvent` union: the fold in
`src.domain.aggregates.identity` matches on every member and treats anything
else as a fatal rehydration error.

Events:
    - UserRegistered: stream-opening event (email + password hash)
    - UserAuthenticated / AuthenticationFailed: login outcomes
    - PasswordChanged
    - IdentityLinked: external provider account bound to the user
    - RoleAssigned / RoleRevoked
    - UserDeactivated: terminal
"""

from dataclasses import dataclass
from uuid import UUID

from src.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True, slots=True)
class UserRegistered(DomainEvent):
    """A new identity was created.

    Attributes:
        user_id: New user's identifier.
        email: Normalised (lowercase) email address.
        password_hash: bcrypt hash; the plaintext never leaves the command.
    """

    user_id: UUID
    email: str
    password_hash: str


@dataclass(frozen=True, kw_only=True, slots=True)
class UserAuthenticated(DomainEvent):
    """The user presented valid credentials."""

    user_id: UUID
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class AuthenticationFailed(DomainEvent):
    """A login for this user failed.

    Attributes:
        user_id: Targeted user.
        reason: Machine-readable reason ("invalid_password", "user_inactive").
        ip_address: Client IP, when known.
    """

    user_id: UUID
    reason: str
    ip_address: str | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class PasswordChanged(DomainEvent):
    """The user's password hash was replaced."""

    user_id: UUID
    password_hash: str


@dataclass(frozen=True, kw_only=True, slots=True)
class IdentityLinked(DomainEvent):
    """An external identity provider account was linked to the user."""

    user_id: UUID
    provider: str
    external_id: str


@dataclass(frozen=True, kw_only=True, slots=True)
class RoleAssigned(DomainEvent):
    """A role was granted to the user."""

    user_id: UUID
    role: str


@dataclass(frozen=True, kw_only=True, slots=True)
class RoleRevoked(DomainEvent):
    """A role was withdrawn from the user."""

    user_id: UUID
    role: str


@dataclass(frozen=True, kw_only=True, slots=True)
class UserDeactivated(DomainEvent):
    """The identity was deactivated (terminal)."""

    user_id: UUID
    reason: str


type IdentityEvent = (
    UserRegistered
    | UserAuthenticated
    | AuthenticationFailed
    | PasswordChanged
    | IdentityLinked
    | RoleAssigned
    | RoleRevoked
    | UserDeactivated
)

IDENTITY_EVENTS: tuple[type[DomainEvent], ...] = (
    UserRegistered,
    UserAuthenticated,
    AuthenticationFailed,
    PasswordChanged,
    IdentityLinked,
    RoleAssigned,
    RoleRevoked,
    UserDeactivated,
)
