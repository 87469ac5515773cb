"""Identity (user) aggregate.

State is the fold of `IdentityEvent`s. Decision functions are pure: they take
the current state plus facts the handler already established (did the
password match, what is the new hash) and return the events to append.
Collaborator calls (hashing, index claims, external proofs) stay in the
command handlers.

Business Rules:
    - Email is unique across identities (enforced by the handler via the
      index store before UserRegistered is appended)
    - Failed logins are recorded; consecutive failures are counted but never
      lock the account
    - Role assignment and revocation are idempotent (no event when unchanged)
    - Deactivation is terminal
"""

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from src.core.enums import ErrorCode
from src.core.errors import AuthenticationError, DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.aggregates.base import require_new, require_state, unknown_event
from src.domain.enums import AggregateType, UserRole
from src.domain.events.base_event import DomainEvent
from src.domain.events.identity_events import (
    AuthenticationFailed,
    IdentityEvent,
    IdentityLinked,
    PasswordChanged,
    RoleAssigned,
    RoleRevoked,
    UserAuthenticated,
    UserDeactivated,
    UserRegistered,
)

AGGREGATE_TYPE = AggregateType.IDENTITY


@dataclass(frozen=True, slots=True, kw_only=True)
class LinkedIdentity:
    """An external provider account bound to a user."""

    provider: str
    external_id: str

    @property
    def index_key(self) -> str:
        """Key in the `linked_identity` index namespace."""
        return f"{self.provider}:{self.external_id}"


@dataclass(frozen=True, slots=True, kw_only=True)
class Identity:
    """Projected user state.

    Attributes:
        id: User identifier.
        email: Normalised email address.
        password_hash: bcrypt hash of the current password.
        roles: Granted roles.
        linked_identities: Bound external accounts.
        active: False once deactivated.
        created_at: Registration time.
        last_authenticated_at: Last successful login.
        consecutive_failures: Failed logins since the last success.
    """

    id: UUID
    email: str
    password_hash: str
    roles: frozenset[str]
    linked_identities: frozenset[LinkedIdentity]
    active: bool
    created_at: datetime
    last_authenticated_at: datetime | None = None
    consecutive_failures: int = 0

    def has_role(self, role: str) -> bool:
        return role in self.roles


def apply_identity_event(state: Identity | None, event: DomainEvent) -> Identity:
    """Apply one event to the projected state (pure)."""
    match event:
        case UserRegistered():
            require_new(state, event, AGGREGATE_TYPE)
            return Identity(
                id=event.user_id,
                email=event.email,
                password_hash=event.password_hash,
                roles=frozenset(),
                linked_identities=frozenset(),
                active=True,
                created_at=event.occurred_at,
            )
        case UserAuthenticated():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(
                current,
                last_authenticated_at=event.occurred_at,
                consecutive_failures=0,
            )
        case AuthenticationFailed():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(current, consecutive_failures=current.consecutive_failures + 1)
        case PasswordChanged():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(current, password_hash=event.password_hash)
        case IdentityLinked():
            current = require_state(state, event, AGGREGATE_TYPE)
            link = LinkedIdentity(provider=event.provider, external_id=event.external_id)
            return replace(current, linked_identities=current.linked_identities | {link})
        case RoleAssigned():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(current, roles=current.roles | {event.role})
        case RoleRevoked():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(current, roles=current.roles - {event.role})
        case UserDeactivated():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(current, active=False)
        case _:
            raise unknown_event(event, AGGREGATE_TYPE)


def _inactive_error() -> AuthenticationError:
    return AuthenticationError(
        code=ErrorCode.USER_INACTIVE,
        message="User account is deactivated",
    )


# =========================================================================
# Decisions
# =========================================================================


def register_user(
    *,
    user_id: UUID,
    email: str,
    password_hash: str,
    occurred_at: datetime,
) -> list[IdentityEvent]:
    """Events for a new registration: the identity plus the default role."""
    return [
        UserRegistered(
            user_id=user_id,
            email=email,
            password_hash=password_hash,
            occurred_at=occurred_at,
        ),
        RoleAssigned(user_id=user_id, role=UserRole.USER.value, occurred_at=occurred_at),
    ]


def authenticate(
    state: Identity,
    *,
    password_matches: bool,
    occurred_at: datetime,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> list[IdentityEvent]:
    """Record the outcome of a credential check.

    Always returns exactly one event: UserAuthenticated on success,
    AuthenticationFailed otherwise (wrong password or deactivated user).
    """
    if not state.active:
        return [
            AuthenticationFailed(
                user_id=state.id,
                reason="user_inactive",
                ip_address=ip_address,
                occurred_at=occurred_at,
            )
        ]
    if not password_matches:
        return [
            AuthenticationFailed(
                user_id=state.id,
                reason="invalid_password",
                ip_address=ip_address,
                occurred_at=occurred_at,
            )
        ]
    return [
        UserAuthenticated(
            user_id=state.id,
            ip_address=ip_address,
            user_agent=user_agent,
            occurred_at=occurred_at,
        )
    ]


def change_password(
    state: Identity,
    *,
    old_password_matches: bool,
    new_password_is_same: bool,
    new_password_hash: str,
    occurred_at: datetime,
) -> Result[list[IdentityEvent], DomainError]:
    """Replace the password after re-authentication with the old one.

    The password policy is checked by the handler before hashing.
    """
    if not state.active:
        return Failure(error=_inactive_error())
    if not old_password_matches:
        return Failure(
            error=AuthenticationError(
                code=ErrorCode.INVALID_CREDENTIALS,
                message="Current password is incorrect",
            )
        )
    if new_password_is_same:
        return Failure(
            error=ValidationError(
                code=ErrorCode.PASSWORD_UNCHANGED,
                message="New password must differ from the current password",
                field="new_password",
            )
        )
    return Success(
        value=[
            PasswordChanged(
                user_id=state.id,
                password_hash=new_password_hash,
                occurred_at=occurred_at,
            )
        ]
    )


def link_identity(
    state: Identity,
    *,
    provider: str,
    external_id: str,
    occurred_at: datetime,
) -> Result[list[IdentityEvent], DomainError]:
    """Bind an external account (no event when already linked to this user)."""
    if not state.active:
        return Failure(error=_inactive_error())
    link = LinkedIdentity(provider=provider, external_id=external_id)
    if link in state.linked_identities:
        return Success(value=[])
    return Success(
        value=[
            IdentityLinked(
                user_id=state.id,
                provider=provider,
                external_id=external_id,
                occurred_at=occurred_at,
            )
        ]
    )


def assign_role(
    state: Identity, *, role: str, occurred_at: datetime
) -> Result[list[IdentityEvent], DomainError]:
    """Grant a role; re-assigning a held role produces no event."""
    if not state.active:
        return Failure(error=_inactive_error())
    if state.has_role(role):
        return Success(value=[])
    return Success(value=[RoleAssigned(user_id=state.id, role=role, occurred_at=occurred_at)])


def revoke_role(
    state: Identity, *, role: str, occurred_at: datetime
) -> Result[list[IdentityEvent], DomainError]:
    """Withdraw a role; revoking a role not held produces no event."""
    if not state.active:
        return Failure(error=_inactive_error())
    if not state.has_role(role):
        return Success(value=[])
    return Success(value=[RoleRevoked(user_id=state.id, role=role, occurred_at=occurred_at)])


def deactivate_user(state: Identity, *, reason: str, occurred_at: datetime) -> list[IdentityEvent]:
    """Deactivate (no event when already inactive)."""
    if not state.active:
        return []
    return [UserDeactivated(user_id=state.id, reason=reason, occurred_at=occurred_at)]
